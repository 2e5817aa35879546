"""
Derived Value Models for SpendVista

Everything in this module is COMPUTED from records and never stored.
The models are frozen so a rendered snapshot cannot drift from the
records it was computed from.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from spendvista.models.records import SavingsGoal, Transaction


class BudgetStatus(str, Enum):
    """How this month's spending compares to the budget."""
    UNSET = "unset"          # No budget set (amount is 0)
    EXCEEDED = "exceeded"    # 100% or more used
    WARNING = "warning"      # At or above the warning threshold
    ON_TRACK = "on-track"


class EmergencyStatus(str, Enum):
    """Progress of the emergency fund towards its target."""
    UNSET = "unset"
    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"


class GoalStatus(str, Enum):
    """Progress of a savings goal towards its target."""
    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"


class Metrics(BaseModel):
    """
    Aggregate values for the dashboard, budget and emergency fund pages.

    Monthly figures cover the calendar month of `reference_date` only.
    Percentages are raw (a fund saved past its target reports > 100);
    clamping for progress bars is a display concern.
    """
    model_config = ConfigDict(frozen=True)

    reference_date: date

    monthly_income: Decimal
    monthly_expenses: Decimal
    total_income: Decimal
    total_expenses: Decimal
    current_balance: Decimal

    budget_amount: Decimal
    budget_used: Decimal
    budget_remaining: Decimal = Field(
        description="Negative when the budget is overspent"
    )
    budget_percentage: Decimal
    budget_status: BudgetStatus

    emergency_target: Decimal
    emergency_saved: Decimal
    emergency_remaining: Decimal
    emergency_percentage: Decimal
    emergency_status: EmergencyStatus


class MonthlyTotals(BaseModel):
    """Income and expenses for one month, for the bar chart."""
    model_config = ConfigDict(frozen=True)

    reference_date: date
    income: Decimal
    expenses: Decimal


class GoalProgress(BaseModel):
    """Derived view of a single savings goal."""
    model_config = ConfigDict(frozen=True)

    goal: SavingsGoal
    percentage: Decimal
    remaining: Decimal
    status: GoalStatus


class DashboardSnapshot(BaseModel):
    """Everything the dashboard page needs in one consistent read."""
    model_config = ConfigDict(frozen=True)

    metrics: Metrics
    recent_transactions: list[Transaction]
    expense_categories: dict[str, Decimal]
    goals: list[GoalProgress]
    has_transactions: bool


class MutationResult(BaseModel):
    """
    Outcome of a change to the records.

    The tracker never prompts or notifies. It returns one of these and
    the view decides what to show. `applied` is False for reported
    no-ops (e.g. deleting an ID that is already gone).
    """
    model_config = ConfigDict(frozen=True)

    action: str
    applied: bool
    message: str
    entity_id: Optional[str] = None
    emergency_allocation: Optional[Decimal] = Field(
        default=None,
        description="Amount moved into the emergency fund by this change"
    )
    metrics: Metrics
