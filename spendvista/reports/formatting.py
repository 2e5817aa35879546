"""Formatting utilities for currency, percentages and status text."""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from spendvista.config import get_settings
from spendvista.metrics import progress_width
from spendvista.models.metrics import BudgetStatus, EmergencyStatus, Metrics
from spendvista.models.records import Transaction


Number = Union[Decimal, float, int]


def format_currency(amount: Number, symbol: Optional[str] = None) -> str:
    """Format an amount with the currency symbol and two decimals.

    Negative amounts keep their sign in front of the symbol.

    Example:
        >>> format_currency(Decimal("1234.5"), symbol="R")
        'R 1,234.50'
        >>> format_currency(Decimal("-20"), symbol="R")
        '-R 20.00'
    """
    symbol = get_settings().app.currency_symbol if symbol is None else symbol
    formatted = f"{abs(amount):,.2f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {formatted}" if symbol else f"{sign}{formatted}"


def format_percentage(percentage: Number) -> str:
    """One decimal place, e.g. '85.0%'."""
    return f"{percentage:.1f}%"


def progress_bar_fraction(percentage: Decimal) -> float:
    """Progress bar fill between 0.0 and 1.0 (for st.progress)."""
    return float(progress_width(percentage) / 100)


def format_transaction_line(transaction: Transaction, symbol: Optional[str] = None) -> str:
    """'+ R 100.00' for income, '- R 40.00' for expenses."""
    sign = "+" if transaction.is_income else "-"
    return f"{sign} {format_currency(transaction.amount, symbol)}"


def format_date(day: date) -> str:
    return day.strftime("%d %b %Y")


def budget_status_message(metrics: Metrics, symbol: Optional[str] = None) -> str:
    status = metrics.budget_status
    if status == BudgetStatus.UNSET:
        return (
            "You haven't set a budget yet. "
            "Set a monthly budget to start tracking your spending."
        )
    if status == BudgetStatus.EXCEEDED:
        return (
            "You've exceeded your monthly budget by "
            f"{format_currency(abs(metrics.budget_remaining), symbol)}."
        )
    if status == BudgetStatus.WARNING:
        return (
            f"You've used {format_percentage(metrics.budget_percentage)} of your budget. "
            "Consider slowing down your spending."
        )
    return (
        "You're on track with your budget. "
        f"{format_currency(metrics.budget_remaining, symbol)} remaining for this month."
    )


def emergency_status_message(metrics: Metrics, symbol: Optional[str] = None) -> str:
    status = metrics.emergency_status
    if status == EmergencyStatus.UNSET:
        return (
            "You haven't set an emergency fund goal yet. "
            "Financial experts recommend saving 3-6 months of expenses."
        )
    if status == EmergencyStatus.COMPLETE:
        return (
            "Congratulations! You've reached your emergency fund goal of "
            f"{format_currency(metrics.emergency_target, symbol)}."
        )
    return (
        f"You've saved {format_currency(metrics.emergency_saved, symbol)} of your "
        f"{format_currency(metrics.emergency_target, symbol)} goal. "
        f"{format_currency(metrics.emergency_remaining, symbol)} remaining."
    )
