"""Presentation helpers: formatting and charts."""

from spendvista.reports.charts import (
    create_expense_category_chart,
    create_income_expense_chart,
)
from spendvista.reports.formatting import (
    budget_status_message,
    emergency_status_message,
    format_currency,
    format_date,
    format_percentage,
    format_transaction_line,
    progress_bar_fraction,
)

__all__ = [
    "budget_status_message",
    "create_expense_category_chart",
    "create_income_expense_chart",
    "emergency_status_message",
    "format_currency",
    "format_date",
    "format_percentage",
    "format_transaction_line",
    "progress_bar_fraction",
]
