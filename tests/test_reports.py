"""
Tests for formatting helpers and Plotly charts.
"""

import pytest
from datetime import date
from decimal import Decimal

from spendvista.metrics import compute_metrics
from spendvista.models.metrics import MonthlyTotals
from spendvista.models.records import Budget, EmergencyFund, Transaction
from spendvista.reports import (
    budget_status_message,
    create_expense_category_chart,
    create_income_expense_chart,
    emergency_status_message,
    format_currency,
    format_date,
    format_percentage,
    format_transaction_line,
    progress_bar_fraction,
)


REFERENCE_DATE = date(2024, 6, 15)


def metrics_for(spent: str, budget: str, target: str = "0", saved: str = "0"):
    transactions = [
        Transaction(type="expense", name="Spend", amount=Decimal(spent), date=date(2024, 6, 1))
    ]
    return compute_metrics(
        transactions,
        Budget(amount=Decimal(budget)),
        EmergencyFund(target=Decimal(target), saved=Decimal(saved)),
        REFERENCE_DATE,
    )


class TestFormatting:
    """Tests for text formatting."""

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5"), symbol="R") == "R 1,234.50"
        assert format_currency(Decimal("-20"), symbol="R") == "-R 20.00"
        assert format_currency(Decimal("0"), symbol="$") == "$ 0.00"
        assert format_currency(Decimal("7.1"), symbol="") == "7.10"

    def test_format_percentage(self):
        assert format_percentage(Decimal("85")) == "85.0%"
        assert format_percentage(Decimal("33.3333")) == "33.3%"

    def test_progress_bar_fraction_is_clamped(self):
        assert progress_bar_fraction(Decimal("150")) == 1.0
        assert progress_bar_fraction(Decimal("25")) == 0.25
        assert progress_bar_fraction(Decimal("0")) == 0.0

    def test_transaction_line(self):
        income = Transaction(type="income", name="Salary", amount=Decimal("100"), date=REFERENCE_DATE)
        expense = Transaction(type="expense", name="Taxi", amount=Decimal("40"), date=REFERENCE_DATE)
        assert format_transaction_line(income, symbol="R") == "+ R 100.00"
        assert format_transaction_line(expense, symbol="R") == "- R 40.00"

    def test_format_date(self):
        assert format_date(date(2024, 6, 3)) == "03 Jun 2024"


class TestStatusMessages:
    """Tests for budget and emergency fund status text."""

    def test_budget_unset(self):
        assert "haven't set a budget" in budget_status_message(metrics_for("10", "0"))

    def test_budget_exceeded(self):
        message = budget_status_message(metrics_for("1200", "1000"), symbol="R")
        assert message == "You've exceeded your monthly budget by R 200.00."

    def test_budget_warning(self):
        assert "85.0%" in budget_status_message(metrics_for("850", "1000"))

    def test_budget_on_track(self):
        message = budget_status_message(metrics_for("100", "1000"), symbol="R")
        assert "R 900.00 remaining" in message

    def test_emergency_messages(self):
        assert "haven't set an emergency fund goal" in emergency_status_message(metrics_for("1", "0"))
        assert "Congratulations" in emergency_status_message(metrics_for("1", "0", "1000", "1000"))
        message = emergency_status_message(metrics_for("1", "0", "1000", "250"), symbol="R")
        assert "R 750.00 remaining" in message


class TestCharts:
    """Tests for the Plotly figures."""

    def test_income_expense_chart(self):
        totals = MonthlyTotals(
            reference_date=REFERENCE_DATE,
            income=Decimal("1000.00"),
            expenses=Decimal("200.50"),
        )
        fig = create_income_expense_chart(totals, symbol="R")
        bar = fig.data[0]
        assert list(bar.x) == ["Income", "Expenses"]
        assert list(bar.y) == [1000.0, 200.5]
        assert "June 2024" in fig.layout.title.text

    def test_category_chart_keeps_order(self):
        fig = create_expense_category_chart({
            "Transport": Decimal("80"),
            "Groceries": Decimal("350"),
        })
        pie = fig.data[0]
        assert list(pie.labels) == ["Transport", "Groceries"]
        assert list(pie.values) == [80.0, 350.0]
        assert pie.sort is False

    def test_category_chart_empty(self):
        fig = create_expense_category_chart({})
        assert len(fig.data) == 0
        assert fig.layout.title.text == "No expenses this month"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
