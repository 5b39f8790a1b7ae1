"""Weak, identity-keyed record of the wrappers the engine has produced."""

from __future__ import annotations

import functools
import threading
import weakref
from typing import Any, Dict


class IdentityRegistry:
    """
    Set of objects tracked by identity without keeping them alive.

    Entries are keyed by ``id()`` and hold only a weak reference, so an
    object that becomes unreachable drops out of the registry on collection.
    Membership compares identity, never equality.
    """

    def __init__(self) -> None:
        self._refs: Dict[int, weakref.ref] = {}
        self._lock = threading.RLock()

    def add(self, obj: Any) -> None:
        key = id(obj)
        selfref = weakref.ref(self)

        def _discard(ref: weakref.ref, key: int = key) -> None:
            registry = selfref()
            if registry is not None:
                registry._forget(key, ref)

        with self._lock:
            self._refs[key] = weakref.ref(obj, _discard)

    def _forget(self, key: int, ref: weakref.ref) -> None:
        with self._lock:
            # The id may already belong to a newer object
            if self._refs.get(key) is ref:
                del self._refs[key]

    def __contains__(self, obj: Any) -> bool:
        with self._lock:
            ref = self._refs.get(id(obj))
        return ref is not None and ref() is obj

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for ref in self._refs.values() if ref() is not None)


@functools.lru_cache(maxsize=None)
def shared_registry() -> IdentityRegistry:
    """Return the registry shared by every engine in the process."""
    return IdentityRegistry()
