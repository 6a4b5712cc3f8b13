"""
Journal Models

A journal entry is a saved exploration: the question, the inputs and
the insights computed at the time. Entries are immutable once saved;
revisiting an entry recomputes the projection from its stored inputs.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, field_validator

from rivela.models.finance import (
    EmotionalContext,
    FinancialData,
    Insight,
    RivelaModel,
    new_id,
)


FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def format_saved_at(moment: datetime) -> str:
    """Format a timestamp the way the journal shows it: '5 mars 2025 à 14:02'."""
    month = FRENCH_MONTHS[moment.month - 1]
    return f"{moment.day} {month} {moment.year} à {moment:%H:%M}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JournalEntry(RivelaModel):
    """One saved exploration."""

    id: str = Field(
        default_factory=new_id,
        description="Exploration ID (opaque string)"
    )
    date: datetime = Field(
        default_factory=_utcnow,
        description="When the entry was created (UTC)"
    )
    question: str = Field(
        ...,
        max_length=1000,
        description="The free-form question the user explored"
    )
    financial_data: FinancialData
    emotional_context: EmotionalContext
    insights: list[Insight] = Field(default_factory=list)
    saved_at: Optional[str] = Field(
        default=None,
        description="Human-readable save time, derived from date if omitted"
    )

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so all entries stay comparable."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def model_post_init(self, __context) -> None:
        if self.saved_at is None:
            self.saved_at = format_saved_at(self.date)

    def matches(self, search: str) -> bool:
        """Case-insensitive match against the question and insight titles."""
        term = search.lower()
        if term in self.question.lower():
            return True
        return any(term in insight.title.lower() for insight in self.insights)
