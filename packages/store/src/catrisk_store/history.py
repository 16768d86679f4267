"""HistoryStore — the bounded, persisted log of past analyses.

The log is an ordered list, newest first, capped at 50 entries. It is
read once from the backing BaseStore at startup and the whole list is
rewritten after every mutation.

Availability wins over durability here: a history blob that cannot be
read or parsed loads as an empty history, and a failed write is logged
and ignored. The in-memory list stays authoritative for the session
either way.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Callable

from catrisk_core.models import HISTORY_STATUSES, HistoryEntry

if TYPE_CHECKING:
    from catrisk_store.base import BaseStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "catrisk_history"
MAX_ENTRIES = 50


class HistoryStore:
    """Owns the history list and its persistence.

    Every mutation builds a new list and swaps it in under a lock, then
    persists. One instance is shared by both orchestrators.
    """

    def __init__(self, backend: BaseStore, key: str = HISTORY_KEY, capacity: int = MAX_ENTRIES):
        self._backend = backend
        self._key = key
        self._capacity = capacity
        self._entries: list[HistoryEntry] = []
        self._last_id = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def load(self) -> list[HistoryEntry]:
        """Read the persisted history. Missing or corrupted data means empty history."""
        with self._lock:
            self._entries = self._read()
            return list(self._entries)

    def _read(self) -> list[HistoryEntry]:
        try:
            blob = self._backend.get(self._key)
        except Exception as e:
            logger.warning("Could not read history (%s): %s", type(e).__name__, e)
            return []
        if not blob:
            return []
        try:
            records = json.loads(blob)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning("Ignoring unparsable history: %s", e)
            return []
        if not isinstance(records, list):
            logger.warning("Ignoring history blob that is not a list (%s)", type(records).__name__)
            return []
        entries = []
        for record in records:
            if not isinstance(record, dict) or not record.get("id"):
                continue
            try:
                entries.append(HistoryEntry.from_dict(record))
            except Exception as e:
                logger.warning("Dropping unreadable history record %r (%s): %s", record.get("id"), type(e).__name__, e)
        return entries[: self._capacity]

    def _persist(self) -> None:
        try:
            blob = json.dumps([e.to_dict() for e in self._entries]).encode("utf-8")
            self._backend.set(self._key, blob)
        except Exception as e:
            # The session keeps working from memory; only durability is lost.
            logger.warning("Could not persist history (%s): %s", type(e).__name__, e)

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def search(self, query: str | None) -> list[HistoryEntry]:
        """Entries whose geography contains ``query``, case-insensitively."""
        if not query or not query.strip():
            return list(self._entries)
        needle = query.lower()
        return [e for e in self._entries if needle in e.geography.lower()]

    def latest_for(self, geography: str) -> HistoryEntry | None:
        """Newest entry for ``geography`` that carries an analysis result."""
        return next(
            (e for e in self._entries if e.geography == geography and e.analysis_result is not None),
            None,
        )

    def next_id(self) -> str:
        """Return a fresh millisecond-clock id, strictly above every id seen so far."""
        with self._lock:
            seen = [int(e.id) for e in self._entries if e.id.isdigit()]
            candidate = max([time.time_ns() // 1_000_000, self._last_id + 1, *(i + 1 for i in seen)])
            self._last_id = candidate
            return str(candidate)

    # ------------------------------------------------------------------ #
    # Mutations — each one is followed by a persist                        #
    # ------------------------------------------------------------------ #

    def insert_front(self, entry: HistoryEntry) -> None:
        """Prepend ``entry``; the oldest entries fall off past capacity."""
        with self._lock:
            self._entries = [entry, *self._entries][: self._capacity]
            self._persist()

    def update_where(
        self,
        predicate: Callable[[HistoryEntry], bool],
        updater: Callable[[HistoryEntry], HistoryEntry],
    ) -> int:
        """Replace every entry matching ``predicate`` with ``updater(entry)``.

        Order and non-matching entries are preserved. Returns the number of
        entries updated.
        """
        with self._lock:
            updated = 0
            entries = []
            for entry in self._entries:
                if predicate(entry):
                    entry = updater(entry)
                    updated += 1
                entries.append(entry)
            self._entries = entries
            self._persist()
            return updated

    def set_status(self, entry_id: str, status: str) -> bool:
        """Set the status of one entry. Unknown ids and statuses are a no-op."""
        if status not in HISTORY_STATUSES:
            logger.warning("Ignoring unknown history status %r", status)
            return False
        return self.update_where(lambda e: e.id == entry_id, lambda e: replace(e, status=status)) > 0

    def remove(self, entry_id: str) -> bool:
        """Delete one entry. Returns False if no entry had that id."""
        with self._lock:
            entries = [e for e in self._entries if e.id != entry_id]
            removed = len(entries) != len(self._entries)
            self._entries = entries
            self._persist()
            return removed
