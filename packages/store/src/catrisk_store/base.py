"""Abstract key-value store interface.

History is persisted as one named blob, so a backend only has to get and
set bytes by key. Any storage (local files, SQLite, memory) implements
this interface; HistoryStore depends on BaseStore, not on a concrete
backend, so backends are swappable without touching the workflows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseStore(ABC):
    """Pluggable persistence for named blobs.

    Implementations may raise on I/O failure. HistoryStore decides what a
    failure means: a failed read is treated as no data and a failed write
    is logged and ignored.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the blob stored under ``key``, or None if there is none."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Replace the blob stored under ``key``."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
