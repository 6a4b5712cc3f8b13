"""
Scenario Simulator

Applies a Scenario (income and expense multipliers, extra amounts, a
duration) to the current totals and reports the monthly, yearly and
cumulative effect on the balance.
"""

from rivela.engine.aggregator import aggregate
from rivela.engine.metrics import percent_of_income
from rivela.engine.projection import MONTHS_PER_YEAR
from rivela.models.finance import FinancialData, RiskLevel, Scenario, ScenarioResult


# Savings rate (percent) at or above which a budget is low risk
LOW_RISK_SAVINGS_RATE = 20

PREDEFINED_SCENARIOS = (
    Scenario(
        id="promotion",
        name="Promotion (+20% revenus)",
        description="Simulation d'une augmentation de salaire de 20%",
        income_multiplier=1.2,
    ),
    Scenario(
        id="expense-reduction",
        name="Réduction dépenses (-15%)",
        description="Optimisation du budget avec réduction des dépenses",
        expense_multiplier=0.85,
    ),
    Scenario(
        id="side-income",
        name="Revenus complémentaires",
        description="Ajout de 500€/mois de revenus supplémentaires",
        extra_income=500,
    ),
    Scenario(
        id="emergency",
        name="Urgence financière",
        description="Perte de 30% des revenus pendant 6 mois",
        income_multiplier=0.7,
        duration_months=6,
    ),
)


def risk_level(balance: float, income: float) -> RiskLevel:
    savings_rate = percent_of_income(balance, income)
    if savings_rate >= LOW_RISK_SAVINGS_RATE:
        return RiskLevel.LOW
    if savings_rate >= 0:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _recommendations(
    scenario: Scenario,
    projected_balance: float,
    current_balance: float,
) -> list[str]:
    recommendations = []

    if projected_balance < 0:
        recommendations.append(
            "Attention : ce scénario génère un déficit. "
            "Considérez des mesures d'ajustement."
        )
        recommendations.append(
            "Réduisez les dépenses non essentielles ou augmentez vos revenus."
        )
    elif projected_balance > current_balance:
        recommendations.append(
            "Excellent ! Ce scénario améliore votre situation financière."
        )
        recommendations.append(
            "Considérez l'investissement de l'excédent pour maximiser les gains."
        )

    if scenario.income_multiplier > 1:
        recommendations.append(
            "Profitez de l'augmentation de revenus pour constituer un fonds d'urgence."
        )
    if scenario.expense_multiplier < 1:
        recommendations.append(
            "Maintenez ces bonnes habitudes d'économie sur le long terme."
        )

    return recommendations


def simulate_scenario(financial_data: FinancialData, scenario: Scenario) -> ScenarioResult:
    """
    Run `scenario` against the current totals.

    monthly_impact is the projected balance minus the current one;
    balance_projection[m - 1] is the current balance plus m months of it.
    """
    totals = aggregate(financial_data)
    current_balance = totals.total_income - totals.total_expenses

    projected_income = totals.total_income * scenario.income_multiplier + scenario.extra_income
    projected_expenses = (
        totals.total_expenses * scenario.expense_multiplier + scenario.extra_expenses
    )
    projected_balance = projected_income - projected_expenses
    monthly_impact = projected_balance - current_balance

    return ScenarioResult(
        scenario_id=scenario.id,
        projected_income=projected_income,
        projected_expenses=projected_expenses,
        projected_balance=projected_balance,
        monthly_impact=monthly_impact,
        yearly_impact=monthly_impact * MONTHS_PER_YEAR,
        cumulative_impact=monthly_impact * scenario.duration_months,
        balance_projection=[
            current_balance + monthly_impact * month
            for month in range(1, scenario.duration_months + 1)
        ],
        risk_level=risk_level(projected_balance, projected_income),
        recommendations=_recommendations(scenario, projected_balance, current_balance),
    )
