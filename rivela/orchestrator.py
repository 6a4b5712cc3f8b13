"""
Main Orchestrator for Rivela

Ties the components together into the flow a user goes through:
1. Question + inputs → validate at the boundary
2. Valid inputs → insights + projection (the engine)
3. Insights → optionally saved to the journal, reopened, deleted

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the engine without passing validation
- The engine stays pure; auditing and storage happen here
- The journal is injected, never global
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field

from rivela.audit import AuditLogger, create_correlation_id
from rivela.config import get_settings
from rivela.config.settings import Settings
from rivela.engine import calculate_insights, calculate_metrics, calculate_projection
from rivela.models.finance import (
    EmotionalContext,
    FinancialData,
    FinancialMetrics,
    Insight,
    Projection,
    new_id,
)
from rivela.models.journal import JournalEntry
from rivela.models.validation import ValidationResult
from rivela.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsJournalStorage,
    InMemoryJournalStorage,
    JournalStorageInterface,
    JsonFileJournalStorage,
    NotFoundError,
    StorageError,
)
from rivela.validation import FinancialInputValidator


logger = structlog.get_logger(__name__)


class InvalidInputError(Exception):
    """Raised when an exploration's inputs fail boundary validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid exploration input: {messages}")


class ExplorationResult(BaseModel):
    """Everything the revelation page needs for one exploration."""
    model_config = ConfigDict(frozen=True)

    exploration_id: str
    correlation_id: UUID
    question: str
    insights: list[Insight]
    projection: Projection
    metrics: FinancialMetrics
    validation: ValidationResult = Field(
        description="Validation outcome; may still carry warnings"
    )


class ExplorationFlow:
    """
    Orchestrates one exploration and its journal.

    Flow:
    1. Validate → FinancialInputValidator, errors abort
    2. Calculate → ranked insights, metrics, projection
    3. Save → append to the journal (only on explicit request)
    """

    def __init__(
        self,
        journal_storage: Optional[JournalStorageInterface] = None,
        validator: Optional[FinancialInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._journal = journal_storage or InMemoryJournalStorage()
        self._validator = validator or FinancialInputValidator()
        self._audit_logger = audit_logger

    @property
    def validator(self) -> FinancialInputValidator:
        return self._validator

    async def explore(
        self,
        question: str,
        financial_data: FinancialData,
        emotional_context: EmotionalContext,
        exploration_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ExplorationResult:
        """
        Validate the inputs and run the insight engine.

        Raises:
            InvalidInputError: If validation found error-level issues
        """
        exploration_id = exploration_id or new_id()
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            item_count = sum(
                len(items) for items in (
                    financial_data.income,
                    financial_data.fixed_expenses,
                    financial_data.variable_expenses,
                    financial_data.debts,
                    financial_data.goals,
                    financial_data.assets,
                )
            )
            await self._audit_logger.log_exploration_started(
                exploration_id=exploration_id,
                item_count=item_count,
                correlation_id=correlation_id,
            )

        validation = self._validator.validate(question, financial_data, emotional_context)
        if not validation.is_valid:
            if self._audit_logger:
                issues = [
                    {"field": i.field, "type": i.issue_type}
                    for i in validation.issues
                    if i.severity == "error"
                ]
                await self._audit_logger.log_validation_failed(
                    exploration_id=exploration_id,
                    issues=issues,
                    correlation_id=correlation_id,
                )
            raise InvalidInputError(validation)

        insights = calculate_insights(financial_data, emotional_context)
        projection = calculate_projection(financial_data, insights)
        metrics = calculate_metrics(financial_data)

        if self._audit_logger:
            await self._audit_logger.log_insights_calculated(
                exploration_id=exploration_id,
                insight_ids=[insight.id for insight in insights],
                current_balance=projection.current,
                total_savings=projection.total_savings,
                correlation_id=correlation_id,
            )

        return ExplorationResult(
            exploration_id=exploration_id,
            correlation_id=correlation_id,
            question=question,
            insights=insights,
            projection=projection,
            metrics=metrics,
            validation=validation,
        )

    async def save_to_journal(
        self,
        exploration_id: str,
        question: str,
        financial_data: FinancialData,
        emotional_context: EmotionalContext,
        insights: list[Insight],
        correlation_id: Optional[UUID] = None,
    ) -> JournalEntry:
        """
        Save an exploration to the journal.

        Called ONLY when the user asks for it.

        Raises:
            DuplicateError: If this exploration was already saved
            StorageError: If the journal backend failed
        """
        entry = JournalEntry(
            id=exploration_id,
            question=question,
            financial_data=financial_data,
            emotional_context=emotional_context,
            insights=insights,
        )

        try:
            await self._journal.append_entry(entry)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    entry_id=exploration_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_journal_entry_saved(
                entry_id=entry.id,
                insight_count=len(insights),
                correlation_id=correlation_id,
            )
        return entry

    async def save_result(
        self,
        result: ExplorationResult,
        financial_data: FinancialData,
        emotional_context: EmotionalContext,
    ) -> JournalEntry:
        """Save a finished exploration under its own id."""
        return await self.save_to_journal(
            exploration_id=result.exploration_id,
            question=result.question,
            financial_data=financial_data,
            emotional_context=emotional_context,
            insights=result.insights,
            correlation_id=result.correlation_id,
        )

    async def list_journal(
        self,
        search: Optional[str] = None,
        sort_by: str = "date",
    ) -> list[JournalEntry]:
        return await self._journal.list_entries(search=search, sort_by=sort_by)

    async def load_from_journal(self, entry_id: str) -> tuple[JournalEntry, Projection]:
        """
        Reopen a saved exploration.

        The projection is recomputed from the entry's own inputs and insights.

        Raises:
            NotFoundError: If no entry has this id
        """
        entry = await self._journal.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Journal entry not found: {entry_id}")

        if self._audit_logger:
            await self._audit_logger.log_journal_entry_loaded(entry_id=entry_id)

        return entry, calculate_projection(entry.financial_data, entry.insights)

    async def reopen_from_journal(
        self,
        entry_id: str,
    ) -> tuple[JournalEntry, ExplorationResult]:
        """
        Rebuild the revelation of a saved exploration.

        The saved insights are shown as they were; only the projection and
        metrics are recomputed from the stored inputs. Validation issues
        are reported on the result, never raised, so entries written by
        older clients can still be opened.

        Raises:
            NotFoundError: If no entry has this id
        """
        entry, projection = await self.load_from_journal(entry_id)
        return entry, ExplorationResult(
            exploration_id=entry.id,
            correlation_id=create_correlation_id(),
            question=entry.question,
            insights=entry.insights,
            projection=projection,
            metrics=calculate_metrics(entry.financial_data),
            validation=self._validator.validate(
                entry.question, entry.financial_data, entry.emotional_context
            ),
        )

    async def delete_from_journal(self, entry_id: str) -> bool:
        """Delete a saved exploration. Returns False if it did not exist."""
        deleted = await self._journal.delete_entry(entry_id)
        if deleted and self._audit_logger:
            await self._audit_logger.log_journal_entry_deleted(entry_id=entry_id)
        return deleted


def create_app_components(
    settings: Optional[Settings] = None,
) -> ExplorationFlow:
    """
    Factory function to build the exploration flow from settings.

    The 'sheets' backend falls back to the local JSON journal when
    Google Sheets is not configured or unreachable.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    backend = app_settings.journal_backend

    journal_storage: JournalStorageInterface
    audit_logger = AuditLogger()  # Local-only logging unless sheets is set up

    if backend == "sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
            client.connect()
            journal_storage = GoogleSheetsJournalStorage(client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(client))
        except Exception as e:
            logger.warning(
                "sheets_storage_unavailable",
                error=str(e),
                fallback_path=app_settings.journal_path,
            )
            journal_storage = JsonFileJournalStorage(app_settings.journal_path)
    elif backend == "memory":
        journal_storage = InMemoryJournalStorage()
    else:
        journal_storage = JsonFileJournalStorage(app_settings.journal_path)

    validator = FinancialInputValidator(max_item_amount=app_settings.max_item_amount)

    return ExplorationFlow(
        journal_storage=journal_storage,
        validator=validator,
        audit_logger=audit_logger,
    )
