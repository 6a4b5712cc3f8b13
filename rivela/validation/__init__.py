"""Input validation package."""

from rivela.validation.validator import FinancialInputValidator

__all__ = ["FinancialInputValidator"]
