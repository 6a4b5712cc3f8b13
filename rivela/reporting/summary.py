"""
Text summary of an exploration, for download from the revelation page.

Presentation only: everything shown here comes from the engine's
aggregates and insights.
"""

from datetime import date
from typing import Optional

from rivela.engine.aggregator import aggregate
from rivela.models.finance import FinancialData, Insight


HEADER = "RIVELA - EXPLORATION FINANCIÈRE"


def summary_filename(generated_on: Optional[date] = None) -> str:
    generated_on = generated_on or date.today()
    return f"rivela-exploration-{generated_on.isoformat()}.txt"


def build_text_summary(
    question: str,
    financial_data: FinancialData,
    insights: list[Insight],
    generated_on: Optional[date] = None,
    currency_symbol: str = "€",
) -> str:
    """
    Render the question, the main totals and the numbered insights.

    Args:
        generated_on: Date printed in the footer (defaults to today)
        currency_symbol: Appended to every amount
    """
    generated_on = generated_on or date.today()
    totals = aggregate(financial_data)

    def money(value: float) -> str:
        return f"{value:.0f}{currency_symbol}"

    lines = [
        HEADER,
        "=" * len(HEADER),
        "",
        f"Question: {question}",
        "",
        "RÉSUMÉ FINANCIER:",
        f"- Revenus: {money(totals.total_income)}",
        f"- Dépenses fixes: {money(totals.total_fixed_expenses)}",
        f"- Dépenses variables: {money(totals.total_variable_expenses)}",
        f"- Dettes: {money(totals.total_debts)}",
        f"- Patrimoine: {money(totals.total_assets)}",
        "",
        "INSIGHTS PRINCIPAUX:",
    ]
    if insights:
        lines.extend(
            f"{index}. {insight.title}: {insight.description}"
            for index, insight in enumerate(insights, start=1)
        )
    else:
        lines.append("Aucun point d'attention particulier.")

    lines.extend(["", f"Généré le {generated_on:%d/%m/%Y}"])
    return "\n".join(lines)
