"""
Aggregator

Sums line items into category totals. No validation happens here:
a NaN amount yields a NaN total.
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict

from rivela.models.finance import Asset, FinancialData, FinancialItem


class CategoryTotals(BaseModel):
    """Per-category sums of one FinancialData snapshot."""
    model_config = ConfigDict(frozen=True)

    total_income: float
    total_fixed_expenses: float
    total_variable_expenses: float
    total_debts: float
    total_assets: float

    @property
    def total_expenses(self) -> float:
        return self.total_fixed_expenses + self.total_variable_expenses + self.total_debts


def sum_items(items: Iterable[FinancialItem]) -> float:
    """Sum of `amount` across the collection, 0 when empty."""
    return sum((item.amount for item in items), 0.0)


def sum_assets(assets: Iterable[Asset]) -> float:
    """Sum of `value` across the assets, 0 when empty."""
    return sum((asset.value for asset in assets), 0.0)


def aggregate(financial_data: FinancialData) -> CategoryTotals:
    return CategoryTotals(
        total_income=sum_items(financial_data.income),
        total_fixed_expenses=sum_items(financial_data.fixed_expenses),
        total_variable_expenses=sum_items(financial_data.variable_expenses),
        total_debts=sum_items(financial_data.debts),
        total_assets=sum_assets(financial_data.assets),
    )
