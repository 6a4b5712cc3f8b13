"""
Audit Models for Rivela

Every exploration leaves a trail:
1. When it started and whether its inputs passed validation
2. Which insights were calculated and how much they were worth
3. What happened to the journal (saves, loads, deletes)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Questions and notes are free text written by the user and are never copied
into audit details; only ids, counts and amounts are.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Exploration
    EXPLORATION_STARTED = "exploration_started"
    INPUT_VALIDATION_FAILED = "input_validation_failed"
    INSIGHTS_CALCULATED = "insights_calculated"

    # Journal
    JOURNAL_ENTRY_SAVED = "journal_entry_saved"
    JOURNAL_ENTRY_LOADED = "journal_entry_loaded"
    JOURNAL_ENTRY_DELETED = "journal_entry_deleted"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What entity is this about? Journal ids are opaque strings.
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'exploration', 'journal_entry')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one exploration)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.exploration_started(exploration_id, correlation_id)
        event = AuditEventBuilder.journal_entry_saved(entry_id, 4, correlation_id)
    """

    @staticmethod
    def exploration_started(
        exploration_id: str,
        item_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPLORATION_STARTED,
            entity_type="exploration",
            entity_id=exploration_id,
            correlation_id=correlation_id,
            description=f"Exploration started with {item_count} line items",
            details={"item_count": item_count},
            is_user_action=True,
        )

    @staticmethod
    def input_validation_failed(
        exploration_id: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="exploration",
            entity_id=exploration_id,
            correlation_id=correlation_id,
            description=f"Input validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def insights_calculated(
        exploration_id: str,
        insight_ids: list[str],
        current_balance: float,
        total_savings: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_CALCULATED,
            entity_type="exploration",
            entity_id=exploration_id,
            correlation_id=correlation_id,
            description=f"{len(insight_ids)} insights calculated",
            details={
                "insight_ids": insight_ids,
                "current_balance": current_balance,
                "total_savings": total_savings,
            },
        )

    @staticmethod
    def journal_entry_saved(
        entry_id: str,
        insight_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOURNAL_ENTRY_SAVED,
            entity_type="journal_entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Journal entry saved with {insight_count} insights",
            details={"insight_count": insight_count},
            is_user_action=True,
        )

    @staticmethod
    def journal_entry_loaded(
        entry_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOURNAL_ENTRY_LOADED,
            entity_type="journal_entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Journal entry reopened",
            is_user_action=True,
        )

    @staticmethod
    def journal_entry_deleted(
        entry_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.JOURNAL_ENTRY_DELETED,
            entity_type="journal_entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Journal entry deleted",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        entry_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="journal_entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Journal entry could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
