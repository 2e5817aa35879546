"""
Two-Stage Validation Pipeline

DESIGN DECISION: Raw form input is validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount is a finite number with at most two decimal places
- Amount sign (positive for transactions, contributions and goal targets)
- Date is a real calendar date
- Transaction type is income or expense

STAGE 2 - SEMANTIC VALIDATION:
- Dates far in the future
- Absurdly large amounts
- Names that will only ever be categorized as "Other"

IMPORTANT: Validation NEVER silently fixes issues.
An amount of 10.555 is rejected, not rounded.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from spendvista.config import AppSettings, get_settings
from spendvista.models.records import SavingsGoal, Transaction, TransactionType
from spendvista.models.validation import ValidationIssue, ValidationResult


class RecordValidationError(ValueError):
    """Input could not be turned into a record."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []


class InvalidAmountError(RecordValidationError):
    """Amount is non-numeric, non-positive or has too many decimal places."""
    pass


class InvalidDateError(RecordValidationError):
    """Date is missing or not a real calendar date."""
    pass


class InvalidRecordError(RecordValidationError):
    """Any other field is unusable (unknown type, empty goal name)."""
    pass


def _error(field: str, issue_type: str, message: str, suggested_fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=suggested_fix,
    )


def _warning(field: str, issue_type: str, message: str, suggested_fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
        suggested_fix=suggested_fix,
    )


def _raise_for(result: ValidationResult, summary: str) -> None:
    """Raise the most specific error for the first failing field."""
    errors = [issue for issue in result.issues if issue.severity == "error"]
    if not errors:
        return
    message = f"{summary}: " + "; ".join(issue.message for issue in errors)
    fields = {issue.field for issue in errors}
    if fields & {"amount", "target", "saved"}:
        raise InvalidAmountError(message, errors)
    if "date" in fields:
        raise InvalidDateError(message, errors)
    raise InvalidRecordError(message, errors)


class RecordValidator:
    """
    Validates raw user input before it becomes a record.

    Stage 1 runs on its own. Stage 2 only runs when stage 1 passes,
    since plausibility checks need a parsed amount and date.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    # -------------------------------------------------------------------------
    # Field parsers (stage 1 building blocks)
    # -------------------------------------------------------------------------

    def _parse_amount(
        self,
        raw: Any,
        field: str,
        allow_zero: bool,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if raw is None or isinstance(raw, bool) or (isinstance(raw, str) and not raw.strip()):
            issues.append(_error(field, "missing", f"{field.capitalize()} is required"))
            return None

        try:
            amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
        except InvalidOperation:
            issues.append(_error(
                field,
                "invalid_format",
                f"{field.capitalize()} '{raw}' is not a number",
                suggested_fix="Enter digits only, e.g. 250.00",
            ))
            return None

        if not amount.is_finite():
            issues.append(_error(field, "invalid_format", f"{field.capitalize()} must be a finite number"))
            return None

        if amount < 0 or (amount == 0 and not allow_zero):
            issues.append(_error(
                field,
                "invalid_value",
                f"{field.capitalize()} must be {'zero or more' if allow_zero else 'greater than zero'}",
            ))
            return None

        try:
            cents = amount.quantize(Decimal("0.01"))
        except InvalidOperation:
            issues.append(_error(field, "invalid_value", f"{field.capitalize()} is too large"))
            return None

        if amount != cents:
            issues.append(_error(
                field,
                "invalid_format",
                f"{field.capitalize()} {amount} has more than two decimal places",
                suggested_fix="Round the amount to cents",
            ))
            return None

        return cents

    def _parse_date(self, raw: Any, issues: list[ValidationIssue]) -> Optional[date]:
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(_error("date", "missing", "Date is required"))
            return None
        if isinstance(raw, str):
            try:
                return date.fromisoformat(raw.strip())
            except ValueError:
                pass
        issues.append(_error(
            "date",
            "invalid_format",
            f"Date '{raw}' is not a valid calendar date",
            suggested_fix="Use the format YYYY-MM-DD",
        ))
        return None

    def _parse_type(self, raw: Any, issues: list[ValidationIssue]) -> Optional[TransactionType]:
        try:
            return TransactionType(raw.strip().lower() if isinstance(raw, str) else raw)
        except ValueError:
            issues.append(_error(
                "type",
                "invalid_value",
                f"Transaction type must be 'income' or 'expense', got '{raw}'",
            ))
            return None

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _validate_semantic(
        self,
        name: str,
        amount: Decimal,
        transaction_date: date,
        reference_date: date,
    ) -> list[ValidationIssue]:
        issues = []

        max_future = reference_date + timedelta(days=self._settings.future_date_tolerance_days)
        if transaction_date > max_future:
            issues.append(_warning(
                "date",
                "future_date",
                f"Date ({transaction_date}) is more than "
                f"{self._settings.future_date_tolerance_days} days in the future",
                suggested_fix="Please verify the date is correct",
            ))

        if amount > self._settings.max_transaction_amount:
            issues.append(_warning(
                "amount",
                "suspicious_value",
                f"Amount ({amount:,.2f}) seems unusually high",
                suggested_fix="Please verify this amount is correct",
            ))

        if not name.split():
            issues.append(_warning(
                "name",
                "missing",
                "Transaction has no name and will be reported under 'Other'",
            ))

        return issues

    def validate_transaction(
        self,
        transaction_type: Any,
        name: Optional[str],
        amount: Any,
        transaction_date: Any,
        reference_date: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage pipeline on transaction form input.

        Args:
            transaction_type: "income" or "expense"
            name: Free-text description
            amount: Amount as entered (string, number or Decimal)
            transaction_date: Date or ISO date string
            reference_date: "Today" for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        issues: list[ValidationIssue] = []

        parsed_type = self._parse_type(transaction_type, issues)
        parsed_amount = self._parse_amount(amount, "amount", False, issues)
        parsed_date = self._parse_date(transaction_date, issues)
        if name and len(name.strip()) > 200:
            issues.append(_error("name", "invalid_value", "Name must be 200 characters or fewer"))

        schema_valid = not any(issue.severity == "error" for issue in issues)

        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_semantic(
                name or "",
                parsed_amount,
                parsed_date,
                reference_date or date.today(),
            )
            issues.extend(semantic_issues)
            semantic_valid = not any(issue.severity == "error" for issue in semantic_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def build_transaction(
        self,
        transaction_type: Any,
        name: Optional[str],
        amount: Any,
        transaction_date: Any,
        reference_date: Optional[date] = None,
    ) -> tuple[Transaction, ValidationResult]:
        """
        Validate input and create the Transaction.

        Raises:
            InvalidAmountError: Amount missing, non-numeric or not positive
            InvalidDateError: Date missing or malformed
            InvalidRecordError: Unknown transaction type
        """
        result = self.validate_transaction(
            transaction_type, name, amount, transaction_date, reference_date
        )
        _raise_for(result, "Transaction rejected")

        transaction = Transaction(
            type=self._parse_type(transaction_type, []),
            name=name or "",
            amount=self._parse_amount(amount, "amount", False, []),
            date=self._parse_date(transaction_date, []),
        )
        return transaction, result

    # -------------------------------------------------------------------------
    # Budget, emergency fund and goals
    # -------------------------------------------------------------------------

    def parse_budget_amount(self, raw: Any) -> Decimal:
        """
        Parse the monthly budget. Zero clears the budget.

        Raises:
            InvalidAmountError: Negative or non-numeric
        """
        issues: list[ValidationIssue] = []
        amount = self._parse_amount(raw, "amount", True, issues)
        if amount is None:
            raise InvalidAmountError("Budget rejected: " + issues[0].message, issues)
        return amount

    def parse_emergency_settings(
        self,
        target: Any,
        allocation: Any,
        saved: Any = None,
    ) -> tuple[Decimal, int, Optional[Decimal]]:
        """
        Parse the emergency fund form.

        `saved` is optional; None leaves the saved balance untouched.

        Returns:
            (target, allocation_percent, saved_or_None)
        """
        issues: list[ValidationIssue] = []
        parsed_target = self._parse_amount(target, "target", True, issues)
        parsed_saved = None
        if saved is not None:
            parsed_saved = self._parse_amount(saved, "saved", True, issues)

        parsed_allocation = None
        try:
            parsed_allocation = int(str(allocation).strip())
        except ValueError:
            issues.append(_error("allocation", "invalid_format", f"Allocation '{allocation}' is not a whole number"))
        if parsed_allocation is not None and not 0 <= parsed_allocation <= 100:
            issues.append(_error("allocation", "invalid_value", "Allocation must be between 0 and 100 percent"))

        result = ValidationResult(
            schema_valid=not issues,
            semantic_valid=not issues,
            is_valid=not issues,
            issues=issues,
        )
        _raise_for(result, "Emergency fund settings rejected")
        return parsed_target, parsed_allocation, parsed_saved

    def build_goal(self, name: Optional[str], target: Any) -> SavingsGoal:
        """
        Validate input and create a SavingsGoal with nothing saved yet.

        Raises:
            InvalidAmountError: Target missing or not positive
            InvalidRecordError: Name missing
        """
        issues: list[ValidationIssue] = []
        if not (name or "").strip():
            issues.append(_error("name", "missing", "Goal name is required"))
        elif len(name.strip()) > 100:
            issues.append(_error("name", "invalid_value", "Goal name must be 100 characters or fewer"))
        parsed_target = self._parse_amount(target, "target", False, issues)

        result = ValidationResult(
            schema_valid=not issues,
            semantic_valid=not issues,
            is_valid=not issues,
            issues=issues,
        )
        _raise_for(result, "Savings goal rejected")
        return SavingsGoal(name=name, target=parsed_target)

    def parse_contribution(self, raw: Any) -> Decimal:
        """
        Parse an amount to add to a savings goal.

        Raises:
            InvalidAmountError: Zero, negative or non-numeric
        """
        issues: list[ValidationIssue] = []
        amount = self._parse_amount(raw, "amount", False, issues)
        if amount is None:
            raise InvalidAmountError("Contribution rejected: " + issues[0].message, issues)
        return amount

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        errors = [issue for issue in result.issues if issue.severity == "error"]
        if errors:
            lines.append("❌ Please fix the following:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
