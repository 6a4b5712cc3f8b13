"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of each exploration, from inputs to saved journal entry
2. Debugging capability
3. A history the user can look back on

The audit logger:
- Is async, like the storage it writes to
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from rivela.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from rivela.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_exploration_started(
        self,
        exploration_id: str,
        item_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log the start of an exploration."""
        await self.log(AuditEventBuilder.exploration_started(
            exploration_id=exploration_id,
            item_count=item_count,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        exploration_id: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log rejected inputs."""
        await self.log(AuditEventBuilder.input_validation_failed(
            exploration_id=exploration_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_insights_calculated(
        self,
        exploration_id: str,
        insight_ids: list[str],
        current_balance: float,
        total_savings: float,
        correlation_id: UUID,
    ) -> None:
        """Log a completed insight calculation."""
        await self.log(AuditEventBuilder.insights_calculated(
            exploration_id=exploration_id,
            insight_ids=insight_ids,
            current_balance=current_balance,
            total_savings=total_savings,
            correlation_id=correlation_id,
        ))

    async def log_journal_entry_saved(
        self,
        entry_id: str,
        insight_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.journal_entry_saved(
            entry_id=entry_id,
            insight_count=insight_count,
            correlation_id=correlation_id,
        ))

    async def log_journal_entry_loaded(
        self,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.journal_entry_loaded(
            entry_id=entry_id,
            correlation_id=correlation_id,
        ))

    async def log_journal_entry_deleted(
        self,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.journal_entry_deleted(
            entry_id=entry_id,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        entry_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.save_failed(
            entry_id=entry_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new exploration and pass it through
    all subsequent operations.
    """
    return uuid4()
