"""
Session State

A string-keyed scratchpad shared by every agent in one invocation.
Sibling branches of a ParallelAgent read and write it concurrently, so
each instance owns one lock. Bulk updates hold it for the whole mapping.
"""

from collections.abc import Iterator, Mapping
from threading import RLock
from typing import Any


class State:
    """
    Thread-safe key/value store.

    Tracks which keys were written since creation (or the last commit),
    which lets a store persist only what changed.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._lock = RLock()
        self._data: dict[str, Any] = dict(initial or {})
        self._delta: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._delta[key] = value

    def update(self, updates: Mapping[str, Any]) -> None:
        """Apply all pairs as a single critical section."""
        with self._lock:
            self._data.update(updates)
            self._delta.update(updates)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot copy; later writes do not show through."""
        with self._lock:
            return dict(self._data)

    def has_delta(self) -> bool:
        with self._lock:
            return bool(self._delta)

    def delta(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._delta)

    def commit(self) -> dict[str, Any]:
        """Return and clear the pending delta."""
        with self._lock:
            delta, self._delta = self._delta, {}
            return delta

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_dict())

    def __repr__(self) -> str:
        return f"State({self.to_dict()!r})"
