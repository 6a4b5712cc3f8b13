"""
JSON File Journal Storage

The local journal: one JSON array in one file, newest entry first,
using the same camelCase layout as the browser journal it replaces.

Writes go to a temporary file that is then moved over the journal, so
a crash mid-write never leaves a truncated file behind. Entries holding
NaN or infinity are refused up front: JSON cannot carry them, and one
such entry would make the whole file unreadable.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from rivela.models.journal import JournalEntry
from rivela.services.storage.interface import (
    DuplicateError,
    JournalStorageInterface,
    StorageError,
    filter_and_sort_entries,
    non_finite_fields,
)


_ENTRIES = TypeAdapter(list[JournalEntry])


class JsonFileJournalStorage(JournalStorageInterface):
    """Journal persisted to a single JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[JournalEntry]:
        if not self._path.exists():
            return []
        try:
            raw = self._path.read_bytes()
            if not raw.strip():
                return []
            return _ENTRIES.validate_json(raw)
        except (OSError, ValidationError) as e:
            raise StorageError(f"Failed to read journal {self._path}: {e}")

    def _write(self, entries: list[JournalEntry]) -> None:
        payload = _ENTRIES.dump_json(entries, by_alias=True, indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write journal {self._path}: {e}")

    async def append_entry(self, entry: JournalEntry) -> bool:
        bad_fields = non_finite_fields(entry)
        if bad_fields:
            raise StorageError(
                f"Journal entry {entry.id} has non-finite numbers: {', '.join(bad_fields)}"
            )
        async with self._lock:
            entries = self._read()
            if any(existing.id == entry.id for existing in entries):
                raise DuplicateError(f"Journal entry already exists: {entry.id}")
            self._write([entry, *entries])
        return True

    async def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        for entry in self._read():
            if entry.id == entry_id:
                return entry
        return None

    async def list_entries(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
    ) -> list[JournalEntry]:
        return filter_and_sort_entries(self._read(), search=search, sort_by=sort_by)

    async def delete_entry(self, entry_id: str) -> bool:
        async with self._lock:
            entries = self._read()
            remaining = [entry for entry in entries if entry.id != entry_id]
            if len(remaining) == len(entries):
                return False
            self._write(remaining)
        return True
