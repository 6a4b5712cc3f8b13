"""
Google Sheets Storage Implementation

The remote journal backend. One journal entry per row; the nested parts
of an entry (financial data, emotional context, insights) are stored as
JSON cells so the sheet stays readable by a human.

TRADEOFFS:
- Not suitable for high-volume data (a personal journal is tiny)
- No transactions (an append is a single API call)
- Limited query capabilities (we filter in Python)
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from rivela.config import get_settings
from rivela.config.settings import GoogleSheetsSettings
from rivela.models.audit import AuditEvent, AuditEventType, AuditSeverity
from rivela.models.finance import EmotionalContext, FinancialData, Insight
from rivela.models.journal import JournalEntry
from rivela.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    JournalStorageInterface,
    StorageError,
    filter_and_sort_entries,
)


JOURNAL_COLUMNS = [
    "id",
    "date",
    "saved_at",
    "question",
    "insight_count",
    "financial_data_json",
    "emotional_context_json",
    "insights_json",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet

    def get_journal_sheet(self) -> gspread.Worksheet:
        """Get or create the Journal worksheet."""
        return self._get_or_create_sheet(
            self._settings.journal_sheet_name, JOURNAL_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsJournalStorage(JournalStorageInterface):
    """
    Google Sheets implementation of journal storage.

    Rows are appended in save order; listing sorts them.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _entry_to_row(self, entry: JournalEntry) -> list:
        """Convert a JournalEntry to a spreadsheet row."""
        return [
            entry.id,
            entry.date.isoformat(),
            entry.saved_at or "",
            entry.question,
            len(entry.insights),
            entry.financial_data.model_dump_json(by_alias=True),
            entry.emotional_context.model_dump_json(by_alias=True),
            json.dumps([insight.model_dump(by_alias=True, mode="json") for insight in entry.insights]),
        ]

    def _row_to_entry(self, row: list) -> JournalEntry:
        """Convert a spreadsheet row to a JournalEntry."""
        insights_json = _safe_get(row, 7)
        return JournalEntry(
            id=_safe_get(row, 0),
            date=datetime.fromisoformat(_safe_get(row, 1)),
            saved_at=_safe_get(row, 2) or None,
            question=_safe_get(row, 3),
            financial_data=FinancialData.model_validate_json(_safe_get(row, 5, "{}")),
            emotional_context=EmotionalContext.model_validate_json(_safe_get(row, 6, "{}")),
            insights=[
                Insight.model_validate(item)
                for item in (json.loads(insights_json) if insights_json else [])
            ],
        )

    def _all_rows(self) -> list[list]:
        sheet = self._client.get_journal_sheet()
        return sheet.get_all_values()[1:]  # Skip header

    @retry(
        retry=retry_if_not_exception_type(DuplicateError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_entry(self, entry: JournalEntry) -> bool:
        """Append a journal entry as a new row."""
        try:
            if any(row and row[0] == entry.id for row in self._all_rows()):
                raise DuplicateError(f"Journal entry already exists: {entry.id}")
            sheet = self._client.get_journal_sheet()
            sheet.append_row(self._entry_to_row(entry), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save journal entry: {e}")

    async def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        """Retrieve a journal entry by its id."""
        try:
            for row in self._all_rows():
                if row and row[0] == entry_id:
                    return self._row_to_entry(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get journal entry: {e}")

    async def list_entries(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
    ) -> list[JournalEntry]:
        """List journal entries, skipping malformed rows."""
        try:
            entries = []
            for row in self._all_rows():
                if not row or not row[0]:  # Skip empty rows
                    continue
                try:
                    entries.append(self._row_to_entry(row))
                except Exception:
                    continue  # Skip malformed rows
        except Exception as e:
            raise StorageError(f"Failed to list journal entries: {e}")

        return filter_and_sort_entries(entries, search=search, sort_by=sort_by)

    async def delete_entry(self, entry_id: str) -> bool:
        """Delete a journal entry by id."""
        try:
            sheet = self._client.get_journal_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
                if row and row[0] == entry_id:
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete journal entry: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        return AuditEvent(
            event_id=UUID(_safe_get(row, 0)),
            timestamp=datetime.fromisoformat(_safe_get(row, 1)),
            event_type=AuditEventType(_safe_get(row, 2)),
            severity=AuditSeverity(_safe_get(row, 3)),
            entity_type=_safe_get(row, 4) or None,
            entity_id=_safe_get(row, 5) or None,
            correlation_id=UUID(_safe_get(row, 6)) if _safe_get(row, 6) else None,
            description=_safe_get(row, 7),
            details=json.loads(_safe_get(row, 8)) if _safe_get(row, 8) else {},
            error_message=_safe_get(row, 9) or None,
            is_user_action=_safe_get(row, 10).lower() == "true",
        )

    def _all_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID, oldest first."""
        try:
            events = [
                event for event in self._all_events()
                if event.correlation_id == correlation_id
            ]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events, newest first."""
        try:
            events = self._all_events()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
