"""
Data Models Package

This package contains all Pydantic models used by Rivela.
All data flowing through the system must conform to these schemas.
"""

from rivela.models.finance import (
    EMOTIONAL_TAGS,
    Asset,
    AssetType,
    EmotionalContext,
    FinancialData,
    FinancialItem,
    FinancialMetrics,
    HiddenFee,
    Insight,
    InsightPriority,
    InsightType,
    Projection,
    RiskLevel,
    Scenario,
    ScenarioResult,
    WhatIfResult,
)
from rivela.models.journal import JournalEntry, format_saved_at
from rivela.models.validation import ValidationIssue, ValidationResult
from rivela.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Financial models
    "EMOTIONAL_TAGS",
    "Asset",
    "AssetType",
    "EmotionalContext",
    "FinancialData",
    "FinancialItem",
    "FinancialMetrics",
    "HiddenFee",
    "Insight",
    "InsightPriority",
    "InsightType",
    "Projection",
    "RiskLevel",
    "Scenario",
    "ScenarioResult",
    "WhatIfResult",
    # Journal
    "JournalEntry",
    "format_saved_at",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
