"""
Validation Result Models

Validation reports problems; it never fixes them. These models carry
what was found back to the caller so the view can show it.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
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
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, formats, positivity)
    Stage 2: Semantic validation (plausibility checks)
    """

    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)

    # Warnings don't block but should be shown
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def errors_for(self, field: str) -> list[ValidationIssue]:
        return [
            issue for issue in self.issues
            if issue.severity == "error" and issue.field == field
        ]
