"""
Validation Models

Results of checking user input at the boundary, before it reaches
the insight engine.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Path of the offending field (e.g. 'income[0].amount')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'negative_amount', 'not_finite')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating one exploration's inputs."""

    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    is_valid: bool = Field(
        ...,
        description="False if any error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        """Messages of non-blocking issues."""
        return [issue.message for issue in self.issues if issue.severity == "warning"]
