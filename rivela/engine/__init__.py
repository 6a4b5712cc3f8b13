"""
Insight Engine

The deterministic core of Rivela:

    FinancialData + EmotionalContext
        -> aggregates -> metrics -> rules -> ranking -> list[Insight]
        -> projection

Alongside: hidden fee detection and scenario simulation, both pure
functions of the same FinancialData.

Pure and synchronous. The engine never raises on numeric content and
never mutates its inputs; it works on a deep copy so that concurrent
edits of the caller's lists cannot skew the aggregates.
"""

from rivela.engine.aggregator import CategoryTotals, aggregate, sum_assets, sum_items
from rivela.engine.hidden_fees import detect_hidden_fees
from rivela.engine.metrics import calculate_metrics, metrics_from_totals
from rivela.engine.projection import (
    calculate_projection,
    realizable_savings,
    simulate_what_if,
)
from rivela.engine.ranking import sort_insights
from rivela.engine.rules import RULES, evaluate_rules
from rivela.engine.scenarios import PREDEFINED_SCENARIOS, simulate_scenario
from rivela.models.finance import EmotionalContext, FinancialData, Insight


def calculate_insights(
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> list[Insight]:
    """Ranked insights for one exploration, ready for display."""
    data = financial_data.model_copy(deep=True)
    emotional = emotional_context.model_copy(deep=True)

    metrics = calculate_metrics(data)
    return sort_insights(evaluate_rules(metrics, data, emotional))


__all__ = [
    "PREDEFINED_SCENARIOS",
    "RULES",
    "CategoryTotals",
    "aggregate",
    "calculate_insights",
    "calculate_metrics",
    "calculate_projection",
    "detect_hidden_fees",
    "evaluate_rules",
    "metrics_from_totals",
    "realizable_savings",
    "simulate_scenario",
    "simulate_what_if",
    "sort_insights",
    "sum_assets",
    "sum_items",
]
