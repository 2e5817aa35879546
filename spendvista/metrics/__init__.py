"""Metrics engine package."""

from spendvista.metrics.engine import (
    apply_emergency_allocation,
    categorize_expenses,
    classify_budget,
    classify_emergency_fund,
    compute_metrics,
    emergency_allocation,
    expense_category,
    goal_progress,
    monthly_totals,
    progress_width,
    recent_transactions,
    to_cents,
    transactions_in_month,
)

__all__ = [
    "apply_emergency_allocation",
    "categorize_expenses",
    "classify_budget",
    "classify_emergency_fund",
    "compute_metrics",
    "emergency_allocation",
    "expense_category",
    "goal_progress",
    "monthly_totals",
    "progress_width",
    "recent_transactions",
    "to_cents",
    "transactions_in_month",
]
