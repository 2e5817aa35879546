"""
Streamlit Frontend for SpendVista

This is the user interface for day-to-day tracking.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before anything is deleted or reset
3. Clear error messages in simple language
4. Visual feedback for all operations
5. No business logic here: every number comes from the tracker

The view only renders. All changes go through FinanceTracker, which
returns a MutationResult; this module decides how to show it.
"""

from datetime import date

import streamlit as st

from spendvista.audit import configure_logging
from spendvista.models.metrics import BudgetStatus, MutationResult
from spendvista.models.records import TransactionType
from spendvista.orchestrator import FinanceTracker, create_tracker
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
from spendvista.services.storage import StorageError, UnknownGoalError
from spendvista.validation import RecordValidationError


# Page configuration
st.set_page_config(
    page_title="SpendVista",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

DARK_MODE_CSS = """
<style>
    .stApp { background-color: #111827; color: #f9fafb; }
</style>
"""


@st.cache_resource
def get_tracker() -> FinanceTracker:
    """Get or create the tracker (cached)."""
    configure_logging()
    try:
        return create_tracker(use_file_storage=True)
    except StorageError as e:
        st.error(f"Failed to open local storage: {e}")
        return create_tracker(use_file_storage=False)


def show_result(result: MutationResult) -> None:
    """Show a mutation outcome; no-ops are info, not success."""
    if result.applied:
        st.success(result.message)
    else:
        st.info(result.message)


def show_rejection(error: Exception) -> None:
    st.error(str(error))


def main():
    """Main application entry point."""
    tracker = get_tracker()

    if tracker.records.preferences.dark_mode:
        st.markdown(DARK_MODE_CSS, unsafe_allow_html=True)

    st.sidebar.title("💸 SpendVista")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏠 Dashboard",
            "➕ Add Transaction",
            "📅 Budget",
            "🛟 Emergency Fund",
            "🎯 Savings Goals",
            "📊 Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "🏠 Dashboard":
        render_dashboard(tracker)
    elif page == "➕ Add Transaction":
        render_transaction_page(tracker)
    elif page == "📅 Budget":
        render_budget_page(tracker)
    elif page == "🛟 Emergency Fund":
        render_emergency_page(tracker)
    elif page == "🎯 Savings Goals":
        render_goals_page(tracker)
    elif page == "📊 Reports":
        render_reports_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_dashboard(tracker: FinanceTracker):
    """Summary cards plus the most recent transactions."""
    st.title("🏠 Dashboard")
    snapshot = tracker.dashboard()
    metrics = snapshot.metrics

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Current Balance", format_currency(metrics.current_balance))
    col2.metric("Monthly Income", format_currency(metrics.monthly_income))
    col3.metric("Monthly Expenses", format_currency(metrics.monthly_expenses))
    col4.metric("Budget Remaining", format_currency(metrics.budget_remaining))

    st.markdown("### Recent Transactions")
    if not snapshot.has_transactions:
        st.info("💸 No transactions yet. Add your first transaction to get started!")
        return

    pending = st.session_state.get("pending_delete_transaction")
    for transaction in snapshot.recent_transactions:
        col_name, col_amount, col_action = st.columns([4, 2, 1])
        col_name.markdown(f"**{transaction.name}**  \n{format_date(transaction.date)}")
        col_amount.markdown(format_transaction_line(transaction))
        if col_action.button("🗑️", key=f"delete-{transaction.id}"):
            st.session_state.pending_delete_transaction = transaction.id
            st.rerun()

        if pending == transaction.id:
            st.warning("Are you sure you want to delete this transaction?")
            yes, no = st.columns(2)
            if yes.button("Yes, delete", key=f"confirm-{transaction.id}"):
                st.session_state.pending_delete_transaction = None
                show_result(tracker.delete_transaction(transaction.id))
                st.rerun()
            if no.button("Cancel", key=f"cancel-{transaction.id}"):
                st.session_state.pending_delete_transaction = None
                st.rerun()


def render_transaction_page(tracker: FinanceTracker):
    """Form for recording income or an expense."""
    st.title("➕ Add Transaction")

    with st.form("transaction-form", clear_on_submit=True):
        transaction_type = st.selectbox(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.capitalize(),
        )
        name = st.text_input("Name", placeholder="e.g., Groceries Woolworths")
        amount = st.text_input("Amount", placeholder="0.00")
        transaction_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add Transaction", type="primary")

    if submitted:
        try:
            result = tracker.add_transaction(transaction_type, name, amount, transaction_date)
        except RecordValidationError as e:
            show_rejection(e)
            return
        show_result(result)
        if result.emergency_allocation:
            st.info(
                f"🛟 {format_currency(result.emergency_allocation)} "
                "was added to your emergency fund."
            )


def render_budget_page(tracker: FinanceTracker):
    """Monthly budget form and usage bar."""
    st.title("📅 Monthly Budget")
    metrics = tracker.metrics()

    with st.form("budget-form"):
        amount = st.text_input("Monthly Budget", value=str(tracker.records.budget.amount))
        if st.form_submit_button("Update Budget", type="primary"):
            try:
                show_result(tracker.update_budget(amount))
                metrics = tracker.metrics()
            except RecordValidationError as e:
                show_rejection(e)

    st.progress(
        progress_bar_fraction(metrics.budget_percentage),
        text=format_percentage(metrics.budget_percentage),
    )
    col1, col2 = st.columns(2)
    col1.metric("Used", format_currency(metrics.budget_used))
    col2.metric("Remaining", format_currency(metrics.budget_remaining))

    message = budget_status_message(metrics)
    if metrics.budget_status == BudgetStatus.EXCEEDED:
        st.error(message)
    elif metrics.budget_status == BudgetStatus.WARNING:
        st.warning(message)
    else:
        st.info(message)


def render_emergency_page(tracker: FinanceTracker):
    """Emergency fund settings and progress."""
    st.title("🛟 Emergency Fund")
    fund = tracker.records.emergency_fund

    with st.form("emergency-form"):
        target = st.text_input("Target Amount", value=str(fund.target))
        allocation = st.number_input(
            "Income Allocation (%)",
            min_value=0,
            max_value=100,
            value=fund.allocation,
            step=1,
        )
        saved = st.text_input("Saved So Far", value=str(fund.saved))
        if st.form_submit_button("Update Emergency Fund", type="primary"):
            try:
                show_result(tracker.update_emergency_fund(target, allocation, saved))
            except RecordValidationError as e:
                show_rejection(e)

    metrics = tracker.metrics()
    st.progress(
        progress_bar_fraction(metrics.emergency_percentage),
        text=format_percentage(metrics.emergency_percentage),
    )
    col1, col2 = st.columns(2)
    col1.metric("Saved", format_currency(metrics.emergency_saved))
    col2.metric("Target", format_currency(metrics.emergency_target))
    st.info(emergency_status_message(metrics))


def render_goals_page(tracker: FinanceTracker):
    """Create goals, contribute to them and delete them."""
    st.title("🎯 Savings Goals")

    with st.form("goal-form", clear_on_submit=True):
        name = st.text_input("Goal Name", placeholder="e.g., Holiday")
        target = st.text_input("Target Amount", placeholder="0.00")
        if st.form_submit_button("Create Goal", type="primary"):
            try:
                show_result(tracker.create_goal(name, target))
            except RecordValidationError as e:
                show_rejection(e)

    goals = tracker.goals_progress()
    if not goals:
        st.info("🎯 No savings goals yet. Create your first goal to start saving!")
        return

    for progress in goals:
        goal = progress.goal
        with st.container(border=True):
            header, delete = st.columns([6, 1])
            header.markdown(f"### {goal.name}")
            if delete.button("🗑️", key=f"delete-goal-{goal.id}"):
                st.session_state.pending_delete_goal = goal.id
                st.rerun()

            if st.session_state.get("pending_delete_goal") == goal.id:
                st.warning("Are you sure you want to delete this goal?")
                yes, no = st.columns(2)
                if yes.button("Yes, delete", key=f"confirm-goal-{goal.id}"):
                    st.session_state.pending_delete_goal = None
                    show_result(tracker.delete_goal(goal.id))
                    st.rerun()
                if no.button("Cancel", key=f"cancel-goal-{goal.id}"):
                    st.session_state.pending_delete_goal = None
                    st.rerun()

            st.progress(
                progress_bar_fraction(progress.percentage),
                text=format_percentage(progress.percentage),
            )
            st.markdown(
                f"Saved: {format_currency(goal.saved)} · Target: {format_currency(goal.target)}"
            )

            amount_col, button_col = st.columns([3, 1])
            amount = amount_col.text_input(
                "Add to this goal",
                key=f"add-to-{goal.id}",
                placeholder="0.00",
            )
            if button_col.button("Add", key=f"add-goal-{goal.id}"):
                try:
                    show_result(tracker.add_to_goal(goal.id, amount))
                except (RecordValidationError, UnknownGoalError) as e:
                    show_rejection(e)


def render_reports_page(tracker: FinanceTracker):
    """This month's charts."""
    st.title("📊 Reports")

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(
            create_income_expense_chart(tracker.monthly_totals()),
            use_container_width=True,
        )
    with col2:
        st.plotly_chart(
            create_expense_category_chart(tracker.expense_categories()),
            use_container_width=True,
        )


def render_settings_page(tracker: FinanceTracker):
    """Render the settings page."""
    st.title("⚙️ Settings")

    dark_mode = st.toggle("Dark mode", value=tracker.records.preferences.dark_mode)
    if dark_mode != tracker.records.preferences.dark_mode:
        tracker.set_dark_mode(dark_mode)
        st.rerun()

    st.markdown("---")
    st.markdown("### Configuration")

    from spendvista.config import validate_all_settings

    status = validate_all_settings()
    for name, key in [("Local Storage", "storage"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    events = tracker.audit_logger.recent_events(limit=10) if tracker.audit_logger else []
    if not events:
        st.caption("No activity recorded in this session.")
    for event in events:
        st.markdown(f"`{event.timestamp:%H:%M:%S}` {event.description}")

    st.markdown("---")
    st.markdown("### Danger Zone")
    if st.button("Reset All Data"):
        st.session_state.confirm_reset = True

    if st.session_state.get("confirm_reset"):
        st.warning("Are you sure you want to reset all data? This action cannot be undone.")
        yes, no = st.columns(2)
        if yes.button("Yes, reset everything"):
            st.session_state.confirm_reset = False
            show_result(tracker.reset_data())
        if no.button("Cancel"):
            st.session_state.confirm_reset = False
            st.rerun()


if __name__ == "__main__":
    main()
