"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .store import EngineStore

__all__ = ['EngineStore']
