"""
Keyed lock registry: one lock per registered key.
"""

import threading
from typing import Optional


class KeyedLocks:
    """
    Hands out a `threading.Lock` per key.

    Locks exist only for keys passed to `register`; looking up any other key
    returns None instead of growing the registry. The registry lock only guards
    registration, so holding the lock for one key never blocks work on another.
    """

    def __init__(self):
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def register(self, key: str) -> threading.Lock:
        """Create the lock for `key` if it has none yet. Idempotent."""
        lock = self._locks.get(key)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock

    def get(self, key: str) -> Optional[threading.Lock]:
        return self._locks.get(key)
