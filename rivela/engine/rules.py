"""
Insight Rule Engine

Each rule is a plain function taking the metrics, the financial data and
the emotional context, and returning an Insight or None. Rules never see
each other's output. RULES fixes the evaluation order, which is also the
tie-break order of the final ranking.

Descriptions use plain number formatting; the raw numbers are kept in
Insight.values for callers that want their own formatting.
"""

from typing import Callable, Optional

from rivela.models.finance import (
    EmotionalContext,
    FinancialData,
    FinancialMetrics,
    Insight,
    InsightPriority,
    InsightType,
)


Rule = Callable[[FinancialMetrics, FinancialData, EmotionalContext], Optional[Insight]]

# Savings below this share of income are flagged
MIN_SAVINGS_SHARE = 0.1
# Variable expenses above this percentage of income are flagged
MAX_VARIABLE_EXPENSES_RATIO = 30
# Assumed reduction achievable on variable expenses
VARIABLE_EXPENSES_REDUCTION = 0.15
# Debts above this share of income are flagged
MAX_DEBT_SHARE = 0.3
SUBSCRIPTION_KEYWORDS = ("abonnement", "netflix", "spotify", "prime")
# Assumed saving achievable by consolidating subscriptions
SUBSCRIPTION_REDUCTION = 0.4
STRESS_MOOD_THRESHOLD = 3
STRESS_TAG = "Anxieux"


def _eur(value: float) -> str:
    return f"{value:.0f}€"


def balance_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    """
    negative-balance, or else low-savings.

    One function so the two can never both fire for the same balance.
    """
    balance = metrics.monthly_balance
    income = metrics.total_income

    if balance < 0:
        deficit = abs(balance)
        return Insight(
            id="negative-balance",
            type=InsightType.WARNING,
            title="Déficit mensuel détecté",
            description=(
                f"Vos dépenses dépassent vos revenus de {_eur(deficit)} par mois. "
                "Il est crucial d'agir rapidement pour rééquilibrer votre budget."
            ),
            impact=deficit,
            priority=InsightPriority.HIGH,
            values={"monthly_balance": balance, "deficit": deficit},
        )

    if balance < income * MIN_SAVINGS_SHARE:
        target = income * MIN_SAVINGS_SHARE
        return Insight(
            id="low-savings",
            type=InsightType.WARNING,
            title="Marge d'épargne insuffisante",
            description=(
                f"Votre capacité d'épargne est de seulement {_eur(balance)} par mois "
                f"({metrics.savings_rate:.1f}%). "
                "Il est recommandé d'épargner au moins 10% de vos revenus."
            ),
            impact=target - balance,
            priority=InsightPriority.MEDIUM,
            values={
                "monthly_balance": balance,
                "savings_rate": metrics.savings_rate,
                "savings_target": target,
            },
        )

    return None


def variable_expenses_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    ratio = metrics.variable_expenses_ratio
    if not ratio > MAX_VARIABLE_EXPENSES_RATIO:
        return None

    potential_savings = metrics.total_variable_expenses * VARIABLE_EXPENSES_REDUCTION
    return Insight(
        id="high-variable-expenses",
        type=InsightType.OPPORTUNITY,
        title="Dépenses variables élevées",
        description=(
            f"Vos dépenses variables représentent {ratio:.1f}% de vos revenus. "
            f"En les réduisant de 15%, vous pourriez économiser {_eur(potential_savings)} par mois."
        ),
        impact=potential_savings,
        priority=InsightPriority.MEDIUM,
        values={
            "variable_expenses_ratio": ratio,
            "total_variable_expenses": metrics.total_variable_expenses,
            "potential_savings": potential_savings,
        },
    )


def debt_ratio_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    ceiling = metrics.total_income * MAX_DEBT_SHARE
    if not metrics.total_debts > ceiling:
        return None

    return Insight(
        id="high-debt-ratio",
        type=InsightType.WARNING,
        title="Endettement préoccupant",
        description=(
            f"Vos dettes représentent {metrics.debt_to_income_ratio:.1f}% de vos revenus "
            "mensuels. Il est recommandé de ne pas dépasser 30%."
        ),
        impact=metrics.total_debts - ceiling,
        priority=InsightPriority.HIGH,
        values={
            "debt_to_income_ratio": metrics.debt_to_income_ratio,
            "total_debts": metrics.total_debts,
            "debt_ceiling": ceiling,
        },
    )


def is_subscription(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in SUBSCRIPTION_KEYWORDS)


def subscription_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    subscriptions = [
        item for item in financial_data.fixed_expenses if is_subscription(item.name)
    ]
    if not subscriptions:
        return None

    total = sum((item.amount for item in subscriptions), 0.0)
    potential_savings = total * SUBSCRIPTION_REDUCTION
    return Insight(
        id="subscription-optimization",
        type=InsightType.RECOMMENDATION,
        title="Optimisation des abonnements",
        description=(
            f"Vous payez {_eur(total)}/mois en abonnements. En regroupant vos services "
            f"et éliminant les doublons, vous pourriez économiser {_eur(potential_savings)}/mois."
        ),
        impact=potential_savings,
        priority=InsightPriority.MEDIUM,
        values={
            "total_subscriptions": total,
            "subscription_count": float(len(subscriptions)),
            "potential_savings": potential_savings,
        },
    )


def emergency_fund_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    target = metrics.emergency_fund_target
    if not metrics.total_assets < target:
        return None

    return Insight(
        id="emergency-fund",
        type=InsightType.RECOMMENDATION,
        title="Fonds d'urgence insuffisant",
        description=(
            f"Votre épargne actuelle de {_eur(metrics.total_assets)} devrait couvrir au moins "
            f"3 mois de dépenses ({_eur(target)}). "
            "Considérez augmenter votre épargne de sécurité."
        ),
        impact=target - metrics.total_assets,
        priority=InsightPriority.MEDIUM,
        values={
            "total_assets": metrics.total_assets,
            "emergency_fund_target": target,
            "emergency_fund_months": metrics.emergency_fund_months,
        },
    )


def emotional_stress_rule(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
) -> Optional[Insight]:
    if not (
        emotional_context.mood <= STRESS_MOOD_THRESHOLD
        and STRESS_TAG in emotional_context.tags
    ):
        return None

    return Insight(
        id="emotional-stress",
        type=InsightType.RECOMMENDATION,
        title="Impact émotionnel détecté",
        description=(
            "Votre stress financier semble affecter votre bien-être. Considérez consulter "
            "un conseiller financier pour réduire cette anxiété et élaborer un plan "
            "d'action concret."
        ),
        impact=0.0,
        priority=InsightPriority.HIGH,
        values={"mood": float(emotional_context.mood)},
    )


RULES: tuple[Rule, ...] = (
    balance_rule,
    variable_expenses_rule,
    debt_ratio_rule,
    subscription_rule,
    emergency_fund_rule,
    emotional_stress_rule,
)


def evaluate_rules(
    metrics: FinancialMetrics,
    financial_data: FinancialData,
    emotional_context: EmotionalContext,
    rules: tuple[Rule, ...] = RULES,
) -> list[Insight]:
    """Run every rule in order and collect the insights they emit."""
    insights = []
    for rule in rules:
        insight = rule(metrics, financial_data, emotional_context)
        if insight is not None:
            insights.append(insight)
    return insights
