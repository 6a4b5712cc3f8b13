"""
Core Financial Models for Rivela

These models describe everything the insight engine reads and produces:
1. The user's line items (income, expenses, debts, goals, assets)
2. The self-reported emotional context of an exploration
3. Insights, metrics and projections computed from them

DESIGN DECISION: Models do NOT reject negative or non-finite amounts.
The engine must stay a pure function that never raises, so validation
lives at the boundary (see rivela.validation) instead of here.

Field names are snake_case in Python; JSON uses the camelCase aliases
of the original client so older journal files stay readable.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


class RivelaModel(BaseModel):
    """Base model: camelCase aliases, population by field name allowed."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class AssetType(str, Enum):
    """Kinds of assets a user can declare."""
    SAVINGS = "savings"
    INVESTMENT = "investment"
    PROPERTY = "property"
    OTHER = "other"


class InsightType(str, Enum):
    """
    Insight categories.

    Warnings describe a problem size; opportunities and recommendations
    describe a saving the user could realize.
    """
    WARNING = "warning"
    OPPORTUNITY = "opportunity"
    RECOMMENDATION = "recommendation"

    @property
    def is_realizable(self) -> bool:
        """True if the impact of this type counts towards projected savings."""
        return self is not InsightType.WARNING


class InsightPriority(str, Enum):
    """Insight priority, ranked high > medium > low."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    InsightPriority.HIGH: 3,
    InsightPriority.MEDIUM: 2,
    InsightPriority.LOW: 1,
}


# Tags offered by the emotional check-in. Free text is still accepted.
EMOTIONAL_TAGS = (
    "Anxieux",
    "Curieux",
    "Motivé",
    "Confus",
    "Optimiste",
    "Inquiet",
    "Serein",
    "Stressé",
    "Déterminé",
    "Perdu",
)


# =============================================================================
# INPUT MODELS
# =============================================================================

class FinancialItem(RivelaModel):
    """A single monthly line item (an income, an expense, a debt or a goal)."""

    id: str = Field(
        default_factory=new_id,
        description="Opaque item identifier"
    )
    name: str = Field(
        default="",
        max_length=200,
        description="Label entered by the user (e.g. 'Loyer', 'Netflix')"
    )
    amount: float = Field(
        default=0.0,
        description="Monthly amount in the user's currency"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=100,
    )


class Asset(RivelaModel):
    """Something the user owns, counted towards the emergency fund."""

    id: str = Field(default_factory=new_id)
    name: str = Field(default="", max_length=200)
    type: AssetType = Field(
        default=AssetType.SAVINGS,
        description="Asset kind"
    )
    value: float = Field(
        default=0.0,
        description="Current value in the user's currency"
    )
    description: Optional[str] = Field(default=None, max_length=500)


class FinancialData(RivelaModel):
    """
    Aggregate root of one exploration's financial inputs.

    Created fresh for each exploration. The engine reads it but
    never mutates it.
    """

    income: list[FinancialItem] = Field(default_factory=list)
    fixed_expenses: list[FinancialItem] = Field(default_factory=list)
    variable_expenses: list[FinancialItem] = Field(default_factory=list)
    debts: list[FinancialItem] = Field(default_factory=list)
    goals: list[FinancialItem] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if nothing at all was entered."""
        return not any((
            self.income,
            self.fixed_expenses,
            self.variable_expenses,
            self.debts,
            self.goals,
            self.assets,
        ))


class EmotionalContext(RivelaModel):
    """How the user feels about the question they are exploring."""

    mood: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Self-reported mood, 1 (very bad) to 10 (very good)"
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Emotional labels, e.g. 'Anxieux'"
    )
    notes: str = Field(default="", max_length=2000)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Tags behave as a set; keep first occurrence order."""
        tags: list[str] = []
        seen = set()
        for tag in v:
            tag = tag.strip()
            if tag and tag not in seen:
                tags.append(tag)
                seen.add(tag)
        return tags


# =============================================================================
# ENGINE OUTPUT MODELS
# =============================================================================

class Insight(RivelaModel):
    """
    A single finding of the rule engine.

    `impact` is a monthly amount: the size of the problem for a warning,
    the realizable saving for an opportunity or recommendation, 0 when
    the finding cannot be expressed in money.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable rule identifier")
    type: InsightType
    title: str
    description: str
    impact: float = Field(default=0.0)
    priority: InsightPriority
    values: dict[str, float] = Field(
        default_factory=dict,
        description="Raw numbers interpolated into the description"
    )


class FinancialMetrics(RivelaModel):
    """Category totals and derived ratios for one FinancialData snapshot."""
    model_config = ConfigDict(frozen=True)

    total_income: float
    total_fixed_expenses: float
    total_variable_expenses: float
    total_debts: float
    total_expenses: float
    total_assets: float

    monthly_balance: float
    # Percentages, not clamped: may exceed 100 when expenses exceed income
    savings_rate: float
    variable_expenses_ratio: float
    debt_to_income_ratio: float

    emergency_fund_target: float
    emergency_fund_months: float


class Projection(RivelaModel):
    """Current vs. optimized monthly balance."""
    model_config = ConfigDict(frozen=True)

    current: float
    optimized: float
    total_savings: float


class WhatIfResult(RivelaModel):
    """Outcome of a manual 'what if' adjustment of income and expenses."""
    model_config = ConfigDict(frozen=True)

    simulated_balance: float
    monthly_impact: float
    yearly_impact: float


# =============================================================================
# DETECTION & SIMULATION MODELS
# =============================================================================

class HiddenFee(RivelaModel):
    """A spending pattern worth a second look, with the monthly amount at stake."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: InsightType
    title: str
    description: str
    amount: float = Field(
        default=0.0,
        description="Monthly amount concerned"
    )


class RiskLevel(str, Enum):
    """How exposed a simulated budget is, from its savings rate."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Scenario(RivelaModel):
    """
    A change applied to the whole budget for a number of months.

    Multipliers scale the current totals; extra amounts are added on top.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default="custom")
    name: str = Field(default="Scénario personnalisé")
    description: str = Field(default="")
    income_multiplier: float = Field(default=1.0, ge=0)
    expense_multiplier: float = Field(default=1.0, ge=0)
    extra_income: float = Field(default=0.0)
    extra_expenses: float = Field(default=0.0)
    duration_months: int = Field(default=12, ge=1, le=120)


class ScenarioResult(RivelaModel):
    """Outcome of running a Scenario against a FinancialData snapshot."""
    model_config = ConfigDict(frozen=True)

    scenario_id: str
    projected_income: float
    projected_expenses: float
    projected_balance: float
    monthly_impact: float
    yearly_impact: float
    cumulative_impact: float
    # Balance at the end of month 1..duration
    balance_projection: list[float]
    risk_level: RiskLevel
    recommendations: list[str] = Field(default_factory=list)
