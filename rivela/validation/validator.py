"""
Boundary Validation

The insight engine accepts whatever it is given: a negative amount or a
NaN simply flows through into meaningless ratios. This module is the
boundary that stops such input before it reaches the engine.

ERRORS (block the exploration):
- Non-finite amounts or asset values (NaN, infinity)
- Negative amounts or asset values
- Line items without a name
- An empty question
- Totals too large to compute (a sum or ratio overflows to infinity)

WARNINGS (shown, but the exploration goes on):
- No income at all (every ratio will read 0%)
- Amounts above the configured sanity ceiling

INFO (noted only):
- Emotional tags outside the proposed vocabulary

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to correct.
"""

import math
from typing import Optional

from rivela.config import get_settings
from rivela.engine.metrics import calculate_metrics
from rivela.models.finance import (
    EMOTIONAL_TAGS,
    EmotionalContext,
    FinancialData,
)
from rivela.models.validation import ValidationIssue, ValidationResult


# Collection name -> label shown to the user
ITEM_COLLECTIONS = {
    "income": "Revenus",
    "fixed_expenses": "Dépenses fixes",
    "variable_expenses": "Dépenses variables",
    "debts": "Dettes",
    "goals": "Objectifs",
}


class FinancialInputValidator:
    """Validates one exploration's inputs before they reach the engine."""

    def __init__(self, max_item_amount: Optional[float] = None):
        """
        Args:
            max_item_amount: Sanity ceiling for a single monthly amount.
                             Defaults to the configured value.
        """
        if max_item_amount is None:
            max_item_amount = get_settings().app.max_item_amount
        self._max_item_amount = max_item_amount

    def _check_amount(
        self,
        field: str,
        label: str,
        value: float,
    ) -> list[ValidationIssue]:
        if not math.isfinite(value):
            return [ValidationIssue(
                field=field,
                issue_type="not_finite",
                message=f"{label}: le montant n'est pas un nombre valide",
                severity="error",
                suggested_fix="Saisissez un montant en chiffres",
            )]
        if value < 0:
            return [ValidationIssue(
                field=field,
                issue_type="negative_amount",
                message=f"{label}: le montant ne peut pas être négatif ({value:.2f})",
                severity="error",
                suggested_fix="Saisissez le montant sans signe moins",
            )]
        if value > self._max_item_amount:
            return [ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"{label}: le montant ({value:,.0f}) semble anormalement élevé",
                severity="warning",
                suggested_fix="Vérifiez qu'il s'agit bien d'un montant mensuel",
            )]
        return []

    def _check_totals(self, data: FinancialData) -> list[ValidationIssue]:
        metrics = calculate_metrics(data)
        overflowing = [
            name for name, value in metrics.model_dump().items()
            if not math.isfinite(value)
        ]
        if not overflowing:
            return []
        return [ValidationIssue(
            field="financial_data",
            issue_type="overflow",
            message=(
                "Les montants sont trop élevés pour être calculés "
                f"({', '.join(overflowing)})"
            ),
            severity="error",
            suggested_fix="Vérifiez les montants saisis",
        )]

    def _validate_financial_data(self, data: FinancialData) -> list[ValidationIssue]:
        issues = []

        for collection, label in ITEM_COLLECTIONS.items():
            for index, item in enumerate(getattr(data, collection)):
                field = f"{collection}[{index}]"
                if not item.name:
                    issues.append(ValidationIssue(
                        field=f"{field}.name",
                        issue_type="missing",
                        message=f"{label}: une ligne n'a pas de nom",
                        severity="error",
                        suggested_fix="Donnez un nom à chaque ligne",
                    ))
                issues.extend(self._check_amount(
                    f"{field}.amount",
                    f"{label} '{item.name}'",
                    item.amount,
                ))

        for index, asset in enumerate(data.assets):
            field = f"assets[{index}]"
            if not asset.name:
                issues.append(ValidationIssue(
                    field=f"{field}.name",
                    issue_type="missing",
                    message="Patrimoine: un actif n'a pas de nom",
                    severity="error",
                    suggested_fix="Donnez un nom à chaque actif",
                ))
            issues.extend(self._check_amount(
                f"{field}.value",
                f"Patrimoine '{asset.name}'",
                asset.value,
            ))

        # Each amount may be finite while their sums or ratios are not
        if not any(issue.issue_type == "not_finite" for issue in issues):
            issues.extend(self._check_totals(data))

        if not data.income:
            issues.append(ValidationIssue(
                field="income",
                issue_type="missing",
                message="Aucun revenu saisi: les ratios seront affichés à 0%",
                severity="warning",
                suggested_fix="Ajoutez au moins une source de revenus",
            ))

        return issues

    def _validate_emotional_context(
        self,
        emotional_context: EmotionalContext,
    ) -> list[ValidationIssue]:
        unknown = [tag for tag in emotional_context.tags if tag not in EMOTIONAL_TAGS]
        if not unknown:
            return []
        return [ValidationIssue(
            field="emotional_context.tags",
            issue_type="unknown_tag",
            message=f"Étiquettes non reconnues: {', '.join(unknown)}",
            severity="info",
        )]

    def validate(
        self,
        question: str,
        financial_data: FinancialData,
        emotional_context: EmotionalContext,
    ) -> ValidationResult:
        """
        Validate everything the user entered for one exploration.

        Returns:
            ValidationResult with all issues found
        """
        issues = []

        if not question or not question.strip():
            issues.append(ValidationIssue(
                field="question",
                issue_type="missing",
                message="La question est vide",
                severity="error",
                suggested_fix="Formulez la question que vous vous posez",
            ))

        issues.extend(self._validate_financial_data(financial_data))
        issues.extend(self._validate_emotional_context(emotional_context))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ Vos données sont prêtes à être analysées."

        lines = []

        if result.has_errors:
            lines.append("❌ Certaines informations doivent être corrigées :")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ À vérifier :")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
