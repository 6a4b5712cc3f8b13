"""Services package."""

from rivela.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsJournalStorage,
    InMemoryJournalStorage,
    JournalStorageInterface,
    JsonFileJournalStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsJournalStorage",
    "InMemoryJournalStorage",
    "JournalStorageInterface",
    "JsonFileJournalStorage",
    "NotFoundError",
    "StorageError",
]
