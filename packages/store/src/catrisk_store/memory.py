"""In-memory store — history that lives only as long as the process.

Selected with ``store: memory``. Useful for one-off analyses that should
not leave anything behind, and as the store in tests.
"""

from __future__ import annotations

from catrisk_store.base import BaseStore


class MemoryStore(BaseStore):
    """Keeps blobs in a dict; nothing is written to disk."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)
