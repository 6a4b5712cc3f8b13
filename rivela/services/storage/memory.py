"""
In-Memory Journal Storage

Keeps entries in a dict for the lifetime of the process. Used by tests
and by the 'memory' backend (nothing survives a restart).
"""

import asyncio
from typing import Optional

from rivela.models.journal import JournalEntry
from rivela.services.storage.interface import (
    DuplicateError,
    JournalStorageInterface,
    filter_and_sort_entries,
)


class InMemoryJournalStorage(JournalStorageInterface):
    """Journal kept in memory, keyed by entry id."""

    def __init__(self):
        self._entries: dict[str, JournalEntry] = {}
        self._lock = asyncio.Lock()

    async def append_entry(self, entry: JournalEntry) -> bool:
        async with self._lock:
            if entry.id in self._entries:
                raise DuplicateError(f"Journal entry already exists: {entry.id}")
            self._entries[entry.id] = entry.model_copy(deep=True)
        return True

    async def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        entry = self._entries.get(entry_id)
        return entry.model_copy(deep=True) if entry else None

    async def list_entries(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
    ) -> list[JournalEntry]:
        entries = [entry.model_copy(deep=True) for entry in self._entries.values()]
        return filter_and_sort_entries(entries, search=search, sort_by=sort_by)

    async def delete_entry(self, entry_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(entry_id, None) is not None
