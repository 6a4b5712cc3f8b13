"""
Metric Calculator

Derives balance, ratios and the emergency-fund target from category
totals. Every ratio over income is guarded: with zero income it is
defined as 0, never NaN or infinity.
"""

from rivela.engine.aggregator import CategoryTotals, aggregate
from rivela.models.finance import FinancialData, FinancialMetrics


# Months of total expenses the emergency fund should cover
EMERGENCY_FUND_MONTHS = 3


def percent_of_income(amount: float, total_income: float) -> float:
    """`amount` as a percentage of income; 0 when there is no income."""
    if total_income > 0:
        return (amount / total_income) * 100
    return 0.0


def metrics_from_totals(totals: CategoryTotals) -> FinancialMetrics:
    total_expenses = totals.total_expenses
    monthly_balance = totals.total_income - total_expenses

    if total_expenses > 0:
        emergency_fund_months = totals.total_assets / total_expenses
    else:
        emergency_fund_months = 0.0

    return FinancialMetrics(
        total_income=totals.total_income,
        total_fixed_expenses=totals.total_fixed_expenses,
        total_variable_expenses=totals.total_variable_expenses,
        total_debts=totals.total_debts,
        total_expenses=total_expenses,
        total_assets=totals.total_assets,
        monthly_balance=monthly_balance,
        savings_rate=percent_of_income(monthly_balance, totals.total_income),
        variable_expenses_ratio=percent_of_income(
            totals.total_variable_expenses, totals.total_income
        ),
        debt_to_income_ratio=percent_of_income(totals.total_debts, totals.total_income),
        emergency_fund_target=total_expenses * EMERGENCY_FUND_MONTHS,
        emergency_fund_months=emergency_fund_months,
    )


def calculate_metrics(financial_data: FinancialData) -> FinancialMetrics:
    """Aggregate the data and derive all metrics in one go."""
    return metrics_from_totals(aggregate(financial_data))
