"""
Storage Services Package

Provides the abstract journal/audit interfaces and their backends:
in-memory (tests), JSON file (default local journal) and Google Sheets
(remote store).
"""

from rivela.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    JournalStorageInterface,
    NotFoundError,
    StorageError,
    filter_and_sort_entries,
    non_finite_fields,
)
from rivela.services.storage.memory import InMemoryJournalStorage
from rivela.services.storage.json_file import JsonFileJournalStorage
from rivela.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsJournalStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "JournalStorageInterface",
    "filter_and_sort_entries",
    "non_finite_fields",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Local implementations
    "InMemoryJournalStorage",
    "JsonFileJournalStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsJournalStorage",
]
