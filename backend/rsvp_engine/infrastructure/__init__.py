"""
Infrastructure layer - storage and synchronization primitives.
Keeps business logic clean from implementation details.
"""

from .locks import KeyedLocks
from .memory_store import InMemoryStore

__all__ = ['KeyedLocks', 'InMemoryStore']
