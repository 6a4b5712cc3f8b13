"""Tests for the downloadable text summary."""

from datetime import date

from rivela.engine import calculate_insights
from rivela.models import Asset, EmotionalContext, FinancialData, FinancialItem
from rivela.reporting import build_text_summary, summary_filename


def sample_data() -> FinancialData:
    return FinancialData(
        income=[FinancialItem(name="Salaire", amount=2000)],
        fixed_expenses=[FinancialItem(name="Loyer", amount=2500)],
        debts=[FinancialItem(name="Crédit", amount=100)],
        assets=[Asset(name="Livret A", value=1200)],
    )


class TestTextSummary:
    """Tests for build_text_summary."""

    def test_totals_and_question(self):
        """The summary lists the question and category totals."""
        text = build_text_summary("Comment sortir du rouge ?", sample_data(), [],
                                  generated_on=date(2025, 3, 5))
        assert text.startswith("RIVELA - EXPLORATION FINANCIÈRE")
        assert "Question: Comment sortir du rouge ?" in text
        assert "- Revenus: 2000€" in text
        assert "- Dépenses fixes: 2500€" in text
        assert "- Dettes: 100€" in text
        assert "- Patrimoine: 1200€" in text
        assert text.endswith("Généré le 05/03/2025")

    def test_numbered_insights(self):
        """Insights are numbered in ranked order."""
        data = sample_data()
        insights = calculate_insights(data, EmotionalContext())
        text = build_text_summary("Question", data, insights)
        assert f"1. {insights[0].title}: {insights[0].description}" in text
        assert f"2. {insights[1].title}" in text

    def test_no_insights(self):
        """An empty list gets an explicit line."""
        text = build_text_summary("Question", FinancialData(), [])
        assert "Aucun point d'attention particulier." in text

    def test_currency_symbol(self):
        """The currency symbol is configurable."""
        text = build_text_summary("Question", sample_data(), [], currency_symbol="$")
        assert "- Revenus: 2000$" in text

    def test_filename(self):
        """The file name carries the date."""
        assert summary_filename(date(2025, 3, 5)) == "rivela-exploration-2025-03-05.txt"
