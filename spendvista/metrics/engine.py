"""
Metrics Engine

DESIGN DECISION: Metric computation is PURE.
Every function here takes records and a reference date and returns
derived values. Nothing reads storage, the clock or settings implicitly;
"now" is resolved only when the caller passes no reference date.

The one exception is apply_emergency_allocation, which mutates the
emergency fund. It is tied to the moment an income is recorded and
must never be replayed over history, or allocations would be counted
twice.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from spendvista.models.metrics import (
    BudgetStatus,
    EmergencyStatus,
    GoalProgress,
    GoalStatus,
    Metrics,
    MonthlyTotals,
)
from spendvista.models.records import (
    Budget,
    EmergencyFund,
    SavingsGoal,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

DEFAULT_BUDGET_WARNING_PERCENTAGE = Decimal("80")
DEFAULT_RECENT_LIMIT = 5
UNCATEGORIZED = "Other"


def _resolve(reference_date: Optional[date]) -> date:
    return reference_date or date.today()


def _in_month(day: date, reference_date: date) -> bool:
    return day.month == reference_date.month and day.year == reference_date.year


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is not positive."""
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


def to_cents(amount: Decimal) -> Decimal:
    """Round a Decimal to whole cents, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def transactions_in_month(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
    transaction_type: Optional[TransactionType] = None,
) -> list[Transaction]:
    """
    Filter transactions dated in the calendar month of reference_date.

    Month and year are compared directly, so any day of the month counts.
    """
    reference_date = _resolve(reference_date)
    return [
        t for t in transactions
        if _in_month(t.date, reference_date)
        and (transaction_type is None or t.type == transaction_type)
    ]


def classify_budget(
    budget_amount: Decimal,
    budget_percentage: Decimal,
    warning_percentage: Decimal = DEFAULT_BUDGET_WARNING_PERCENTAGE,
) -> BudgetStatus:
    if budget_amount == 0:
        return BudgetStatus.UNSET
    if budget_percentage >= HUNDRED:
        return BudgetStatus.EXCEEDED
    if budget_percentage >= warning_percentage:
        return BudgetStatus.WARNING
    return BudgetStatus.ON_TRACK


def classify_emergency_fund(target: Decimal, percentage: Decimal) -> EmergencyStatus:
    if target == 0:
        return EmergencyStatus.UNSET
    if percentage >= HUNDRED:
        return EmergencyStatus.COMPLETE
    return EmergencyStatus.IN_PROGRESS


def compute_metrics(
    transactions: Sequence[Transaction],
    budget: Budget,
    emergency_fund: EmergencyFund,
    reference_date: Optional[date] = None,
    warning_percentage: Decimal = DEFAULT_BUDGET_WARNING_PERCENTAGE,
) -> Metrics:
    """
    Compute the dashboard metrics for the month of reference_date.

    Args:
        transactions: All recorded transactions
        budget: The monthly budget
        emergency_fund: The emergency fund
        reference_date: Any day in the month to report on (default: today)
        warning_percentage: Budget usage at which status becomes WARNING

    Returns:
        A frozen Metrics snapshot
    """
    reference_date = _resolve(reference_date)

    incomes = [t for t in transactions if t.type == TransactionType.INCOME]
    expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]

    monthly_income = _total(t for t in incomes if _in_month(t.date, reference_date))
    monthly_expenses = _total(t for t in expenses if _in_month(t.date, reference_date))
    total_income = _total(incomes)
    total_expenses = _total(expenses)

    budget_used = monthly_expenses
    budget_percentage = _percentage(budget_used, budget.amount)

    emergency_percentage = _percentage(emergency_fund.saved, emergency_fund.target)

    return Metrics(
        reference_date=reference_date,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        total_income=total_income,
        total_expenses=total_expenses,
        current_balance=total_income - total_expenses,
        budget_amount=budget.amount,
        budget_used=budget_used,
        budget_remaining=budget.amount - budget_used,
        budget_percentage=budget_percentage,
        budget_status=classify_budget(
            budget.amount, budget_percentage, warning_percentage
        ),
        emergency_target=emergency_fund.target,
        emergency_saved=emergency_fund.saved,
        emergency_remaining=emergency_fund.target - emergency_fund.saved,
        emergency_percentage=emergency_percentage,
        emergency_status=classify_emergency_fund(
            emergency_fund.target, emergency_percentage
        ),
    )


def expense_category(name: str) -> str:
    """First whitespace-delimited word of a transaction name, or 'Other'."""
    words = name.split()
    return words[0] if words else UNCATEGORIZED


def categorize_expenses(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> dict[str, Decimal]:
    """
    Total this month's expenses per category.

    Categories appear in the order they are first seen, which keeps
    chart legends stable between renders.
    """
    categories: dict[str, Decimal] = {}
    for transaction in transactions_in_month(
        transactions, reference_date, TransactionType.EXPENSE
    ):
        category = expense_category(transaction.name)
        categories[category] = categories.get(category, ZERO) + transaction.amount
    return categories


def monthly_totals(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> MonthlyTotals:
    """Income and expenses for the month of reference_date."""
    reference_date = _resolve(reference_date)
    current = transactions_in_month(transactions, reference_date)
    return MonthlyTotals(
        reference_date=reference_date,
        income=_total(t for t in current if t.type == TransactionType.INCOME),
        expenses=_total(t for t in current if t.type == TransactionType.EXPENSE),
    )


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = DEFAULT_RECENT_LIMIT,
) -> list[Transaction]:
    """The last `limit` transactions by insertion order, newest first."""
    if limit <= 0:
        return []
    return list(reversed(transactions[-limit:]))


def goal_progress(goal: SavingsGoal) -> GoalProgress:
    percentage = _percentage(goal.saved, goal.target)
    return GoalProgress(
        goal=goal,
        percentage=percentage,
        remaining=max(goal.target - goal.saved, ZERO),
        status=GoalStatus.COMPLETE if percentage >= HUNDRED else GoalStatus.IN_PROGRESS,
    )


def progress_width(percentage: Decimal) -> Decimal:
    """Clamp a raw percentage to [0, 100] for a progress bar."""
    return min(max(percentage, ZERO), HUNDRED)


def emergency_allocation(emergency_fund: EmergencyFund, income_amount: Decimal) -> Decimal:
    """The share of an income that goes to the emergency fund, in cents."""
    return to_cents(income_amount * emergency_fund.allocation / HUNDRED)


def apply_emergency_allocation(
    emergency_fund: EmergencyFund,
    transaction_amount: Decimal,
) -> Decimal:
    """
    Move `allocation` percent of a new income into the emergency fund.

    Call exactly once, when the income is recorded.

    Returns:
        The fund's updated saved amount
    """
    if transaction_amount <= 0:
        raise ValueError(f"Income amount must be positive, got {transaction_amount}")
    if emergency_fund.allocation > 0:
        emergency_fund.saved = emergency_fund.saved + emergency_allocation(
            emergency_fund, transaction_amount
        )
    return emergency_fund.saved
