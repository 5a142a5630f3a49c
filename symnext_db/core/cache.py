"""
Process-local key -> list map used to cache SHOW/DESCRIBE results.

No eviction: entries live until the consumer calls ``forget()`` or ``clear()``.
Not synchronized; one handle, one writer.
"""

from typing import Any


class DatabaseCache:
    """Key to list-of-entries map with single and bulk append."""

    def __init__(self) -> None:
        self._storage: dict[str, list[Any]] = {}

    def append(self, key: str, value: Any) -> None:
        """Add one value to the list stored under *key*."""
        self._storage.setdefault(key, []).append(value)

    def append_all(self, key: str, values: list[Any]) -> None:
        """Add every value to the list stored under *key*."""
        self._storage.setdefault(key, []).extend(values)

    def get(self, key: str) -> list[Any] | None:
        """Return the list for *key*, or None if the key was never written."""
        if not self.has(key):
            return None
        return self._storage[key]

    def has(self, key: str) -> bool:
        return key in self._storage

    def forget(self, key: str) -> None:
        self._storage.pop(key, None)

    def clear(self) -> None:
        self._storage.clear()
