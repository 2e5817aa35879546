"""Plotly figures for the Reports page.

Each function takes values already computed by :mod:`spendvista.metrics`
and only turns them into a figure. No aggregation happens here, so the
charts can never disagree with the dashboard numbers.
"""

from decimal import Decimal
from typing import Mapping, Optional

import plotly.graph_objects as go

from spendvista.config import get_settings
from spendvista.models.metrics import MonthlyTotals


INCOME_COLOR = "rgba(16, 185, 129, 0.7)"
EXPENSE_COLOR = "rgba(239, 68, 68, 0.7)"

CATEGORY_COLORS = [
    "rgba(239, 68, 68, 0.7)",
    "rgba(245, 158, 11, 0.7)",
    "rgba(16, 185, 129, 0.7)",
    "rgba(59, 130, 246, 0.7)",
    "rgba(139, 92, 246, 0.7)",
    "rgba(236, 72, 153, 0.7)",
]


def create_income_expense_chart(
    totals: MonthlyTotals,
    symbol: Optional[str] = None,
) -> go.Figure:
    """Bar chart of this month's income against this month's expenses."""
    symbol = get_settings().app.currency_symbol if symbol is None else symbol
    fig = go.Figure(
        go.Bar(
            x=["Income", "Expenses"],
            y=[float(totals.income), float(totals.expenses)],
            marker_color=[INCOME_COLOR, EXPENSE_COLOR],
            name=f"Amount ({symbol})",
        )
    )
    fig.update_layout(
        title=f"Income vs Expenses - {totals.reference_date.strftime('%B %Y')}",
        yaxis=dict(rangemode="tozero", tickprefix=f"{symbol} "),
        showlegend=False,
    )
    return fig


def create_expense_category_chart(categories: Mapping[str, Decimal]) -> go.Figure:
    """Pie chart of this month's expenses by category.

    Slices keep the mapping's order, so the legend is stable as long
    as the categories are passed in first-seen order.
    """
    if not categories:
        fig = go.Figure()
        fig.update_layout(title="No expenses this month")
        return fig

    labels = list(categories.keys())
    colors = [CATEGORY_COLORS[i % len(CATEGORY_COLORS)] for i in range(len(labels))]
    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=[float(v) for v in categories.values()],
            marker=dict(colors=colors),
            sort=False,
        )
    )
    fig.update_layout(
        title="Expenses by Category",
        legend=dict(orientation="h", yanchor="top", y=-0.1),
    )
    return fig
