"""
Projection Calculator

Compares the current monthly balance with the balance the user would
reach by acting on every opportunity and recommendation. Warnings are
left out: their impact measures a problem, not a saving.
"""

from typing import Iterable

from rivela.engine.aggregator import aggregate
from rivela.models.finance import FinancialData, Insight, Projection, WhatIfResult


MONTHS_PER_YEAR = 12


def realizable_savings(insights: Iterable[Insight]) -> float:
    """Sum of the impact of opportunity and recommendation insights."""
    return sum(
        (insight.impact for insight in insights if insight.type.is_realizable),
        0.0,
    )


def calculate_projection(
    financial_data: FinancialData,
    insights: Iterable[Insight],
) -> Projection:
    """
    Current vs. optimized balance.

    The current balance is recomputed from `financial_data` rather than
    read from the insights, so the two must come from the same exploration.
    """
    totals = aggregate(financial_data)
    current = totals.total_income - totals.total_expenses
    total_savings = realizable_savings(insights)

    return Projection(
        current=current,
        optimized=current + total_savings,
        total_savings=total_savings,
    )


def simulate_what_if(
    current_balance: float,
    income_change: float = 0.0,
    expense_reduction: float = 0.0,
) -> WhatIfResult:
    """
    Apply a manual income change and expense reduction to a balance.

    A positive `expense_reduction` means spending less, so it raises
    the balance just like extra income does.
    """
    monthly_impact = income_change + expense_reduction
    return WhatIfResult(
        simulated_balance=current_balance + monthly_impact,
        monthly_impact=monthly_impact,
        yearly_impact=monthly_impact * MONTHS_PER_YEAR,
    )
