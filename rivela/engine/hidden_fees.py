"""
Hidden Fee Detector

Looks at line item names for spending that tends to go unnoticed:
overlapping bank fees, a pile of subscriptions, loose variable spending.
Unlike the rule engine these detections report the amount concerned,
not a saving, so they never feed the projection.
"""

from rivela.engine.aggregator import sum_items
from rivela.engine.rules import MAX_VARIABLE_EXPENSES_RATIO, is_subscription
from rivela.models.finance import FinancialData, HiddenFee, InsightType


BANK_FEE_KEYWORDS = ("banque", "carte", "compte")
# More bank fees than this suggests overlapping accounts
MAX_BANK_FEES = 1
MAX_SUBSCRIPTIONS = 3


def is_bank_fee(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in BANK_FEE_KEYWORDS)


def detect_hidden_fees(financial_data: FinancialData) -> list[HiddenFee]:
    """Detections in a fixed order: bank fees, subscriptions, variable spending."""
    detections = []

    bank_fees = [
        item for item in financial_data.fixed_expenses if is_bank_fee(item.name)
    ]
    if len(bank_fees) > MAX_BANK_FEES:
        detections.append(HiddenFee(
            id="multiple-bank-fees",
            type=InsightType.WARNING,
            title="Frais bancaires multiples détectés",
            description=(
                "Vous avez plusieurs frais bancaires. "
                "Considérez regrouper vos comptes."
            ),
            amount=sum_items(bank_fees),
        ))

    subscriptions = [
        item for item in financial_data.fixed_expenses if is_subscription(item.name)
    ]
    if len(subscriptions) > MAX_SUBSCRIPTIONS:
        detections.append(HiddenFee(
            id="many-subscriptions",
            type=InsightType.OPPORTUNITY,
            title="Nombreux abonnements détectés",
            description=(
                f"{len(subscriptions)} abonnements trouvés. "
                "Vérifiez lesquels vous utilisez réellement."
            ),
            amount=sum_items(subscriptions),
        ))

    total_variable = sum_items(financial_data.variable_expenses)
    ceiling = sum_items(financial_data.income) * MAX_VARIABLE_EXPENSES_RATIO / 100
    if total_variable > ceiling:
        detections.append(HiddenFee(
            id="variable-expenses-overrun",
            type=InsightType.WARNING,
            title="Dépenses variables élevées",
            description="Vos dépenses variables représentent plus de 30% de vos revenus.",
            amount=total_variable - ceiling,
        ))

    return detections
