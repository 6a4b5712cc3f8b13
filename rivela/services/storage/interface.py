"""
Abstract Storage Interface

DESIGN DECISION: The journal is an injected repository, never global state.
This allows us to:
1. Keep the journal in a local JSON file (the default)
2. Use in-memory storage for testing
3. Move to a remote store (Google Sheets) without touching the flows

The interface is intentionally small: append, list, get, delete.
"""

import math
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from rivela.models.audit import AuditEvent
from rivela.models.journal import JournalEntry


JOURNAL_SORT_KEYS = ("date", "insights")


def filter_and_sort_entries(
    entries: list[JournalEntry],
    search: Optional[str] = None,
    sort_by: str = "date",
) -> list[JournalEntry]:
    """
    Shared listing logic for every backend.

    Newest first when sorting by date; most insights first when sorting
    by insights (ties stay newest first).
    """
    if sort_by not in JOURNAL_SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}. Allowed: {JOURNAL_SORT_KEYS}")

    if search:
        entries = [entry for entry in entries if entry.matches(search)]

    entries = sorted(entries, key=lambda e: e.date, reverse=True)
    if sort_by == "insights":
        entries.sort(key=lambda e: len(e.insights), reverse=True)
    return entries


def non_finite_fields(entry: JournalEntry) -> list[str]:
    """
    Paths of every NaN or infinite number in the entry.

    JSON has no representation for these, so an entry containing one
    would not survive a write and read back.
    """
    found = []

    def walk(value, path: str) -> None:
        if isinstance(value, float):
            if not math.isfinite(value):
                found.append(path)
        elif isinstance(value, dict):
            for key, item in value.items():
                walk(item, f"{path}.{key}" if path else str(key))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                walk(item, f"{path}[{index}]")

    walk(entry.model_dump(), "")
    return found


class JournalStorageInterface(ABC):
    """
    Abstract interface for journal storage operations.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def append_entry(self, entry: JournalEntry) -> bool:
        """
        Append an entry to the journal.

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If an entry with the same id exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        """
        Retrieve an entry by its id.

        Returns:
            The entry if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_entries(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
    ) -> list[JournalEntry]:
        """
        List journal entries.

        Args:
            search: Case-insensitive term matched against the question
                    and the insight titles
            sort_by: 'date' (newest first) or 'insights' (most first)

        Returns:
            List of matching entries
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> bool:
        """
        Delete an entry by id.

        Returns:
            True if deleted, False if no such entry existed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events of one exploration, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
