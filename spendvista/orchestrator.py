"""
Main Orchestrator for SpendVista

This module ties together storage, validation, the metrics engine and
the audit log, and defines every change the user can make:
1. Transactions (add, delete) including the emergency fund allocation
2. Budget and emergency fund settings
3. Savings goals (create, contribute, delete)
4. Preferences and full reset

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every change goes through validation first
- Every change is saved before its result is returned
- Every result carries metrics recomputed from the CURRENT records
- Nothing here prompts or notifies; the view decides what to show

This is the "glue" that owns the one mutable record set and hands it
to the pure metrics engine on every read.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from spendvista.audit import AuditLogger
from spendvista.config import AppSettings, get_settings
from spendvista.metrics import (
    apply_emergency_allocation,
    categorize_expenses,
    compute_metrics,
    emergency_allocation,
    goal_progress,
    monthly_totals,
    recent_transactions,
)
from spendvista.models.audit import AuditEvent, AuditEventBuilder
from spendvista.models.metrics import (
    DashboardSnapshot,
    GoalProgress,
    Metrics,
    MonthlyTotals,
    MutationResult,
)
from spendvista.models.records import (
    Budget,
    EmergencyFund,
    RecordSet,
    Transaction,
)
from spendvista.services.storage import (
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileRecordStorage,
    RecordStorageInterface,
    StorageError,
    UnknownGoalError,
    UnknownTransactionError,
)
from spendvista.validation import RecordValidationError, RecordValidator


class FinanceTracker:
    """
    Owns the user's records and applies every change to them.

    Flow for each mutation:
    1. Validate → reject bad input with an explicit error
    2. Mutate → change the in-memory record set
    3. Save → persist through storage (rolled back if the save fails)
    4. Recompute → derive fresh metrics from the current records
    5. Return → a MutationResult for the view to render
    """

    def __init__(
        self,
        storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[RecordValidator] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app
        self._validator = validator or RecordValidator(self._settings)
        self._records = self._load()

    @property
    def records(self) -> RecordSet:
        """The live record set. Change it only through tracker methods."""
        return self._records

    @property
    def validator(self) -> RecordValidator:
        return self._validator

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    def _load(self) -> RecordSet:
        records = self._storage.load()
        if self._audit_logger and self._storage.load_issues:
            self._audit_logger.log_storage_fallbacks(self._storage.load_issues)
        return records

    def reload(self) -> RecordSet:
        """Discard in-memory state and read the records from storage again."""
        self._records = self._load()
        return self._records

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _log_error(self, error_type: str, error: Exception, action: str) -> None:
        if self._audit_logger:
            self._audit_logger.log_error(
                error_type=error_type,
                error_message=str(error),
                details={"action": action},
            )

    # =========================================================================
    # Reads
    # =========================================================================

    def metrics(self, reference_date: Optional[date] = None) -> Metrics:
        return compute_metrics(
            self._records.transactions,
            self._records.budget,
            self._records.emergency_fund,
            reference_date=reference_date,
            warning_percentage=self._settings.budget_warning_percentage,
        )

    def expense_categories(self, reference_date: Optional[date] = None) -> dict[str, Decimal]:
        return categorize_expenses(self._records.transactions, reference_date)

    def monthly_totals(self, reference_date: Optional[date] = None) -> MonthlyTotals:
        return monthly_totals(self._records.transactions, reference_date)

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        return recent_transactions(
            self._records.transactions,
            self._settings.recent_transaction_count if limit is None else limit,
        )

    def goals_progress(self) -> list[GoalProgress]:
        return [goal_progress(goal) for goal in self._records.savings_goals]

    def dashboard(self, reference_date: Optional[date] = None) -> DashboardSnapshot:
        """Everything the dashboard shows, computed in one pass."""
        reference_date = reference_date or date.today()
        return DashboardSnapshot(
            metrics=self.metrics(reference_date),
            recent_transactions=self.recent_transactions(),
            expense_categories=self.expense_categories(reference_date),
            goals=self.goals_progress(),
            has_transactions=bool(self._records.transactions),
        )

    # =========================================================================
    # Mutation plumbing
    # =========================================================================

    def _commit(
        self,
        snapshot: RecordSet,
        action: str,
        message: str,
        entity_id: Optional[str] = None,
        allocation: Optional[Decimal] = None,
        reference_date: Optional[date] = None,
    ) -> MutationResult:
        """
        Save the records and return fresh metrics.

        If the save fails, the in-memory records are restored from
        `snapshot` and the snapshot is saved again, so keys written
        before the failure are put back and storage matches memory.
        """
        try:
            self._storage.save(self._records)
        except StorageError as e:
            self._records = snapshot
            self._log_error("save_failed", e, action)
            try:
                self._storage.save(snapshot)
            except StorageError as restore_error:
                self._log_error("restore_failed", restore_error, action)
            raise

        return MutationResult(
            action=action,
            applied=True,
            message=message,
            entity_id=entity_id,
            emergency_allocation=allocation,
            metrics=self.metrics(reference_date),
        )

    def _not_applied(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        reference_date: Optional[date] = None,
    ) -> MutationResult:
        """Reported no-op for a record that no longer exists."""
        self._audit(AuditEventBuilder.record_not_found(entity_type, entity_id, action))
        return MutationResult(
            action=action,
            applied=False,
            message=f"No {entity_type} with id {entity_id}; nothing to do",
            entity_id=entity_id,
            metrics=self.metrics(reference_date),
        )

    def _snapshot(self) -> RecordSet:
        return self._records.model_copy(deep=True)

    # =========================================================================
    # Transactions
    # =========================================================================

    def add_transaction(
        self,
        transaction_type: Any,
        name: Optional[str],
        amount: Any,
        transaction_date: Any,
        reference_date: Optional[date] = None,
    ) -> MutationResult:
        """
        Record a new transaction.

        For income, `allocation` percent of the amount is moved into
        the emergency fund here and only here.

        Raises:
            InvalidAmountError, InvalidDateError, InvalidRecordError:
                The input was rejected; nothing changed
        """
        try:
            transaction, validation = self._validator.build_transaction(
                transaction_type, name, amount, transaction_date, reference_date
            )
        except RecordValidationError as e:
            self._audit(AuditEventBuilder.transaction_rejected(
                [issue.model_dump() for issue in e.issues]
            ))
            raise

        snapshot = self._snapshot()
        self._records.transactions.append(transaction)

        allocated = None
        fund = self._records.emergency_fund
        if transaction.is_income and fund.allocation > 0:
            allocated = emergency_allocation(fund, transaction.amount)
            apply_emergency_allocation(fund, transaction.amount)

        result = self._commit(
            snapshot,
            action="add_transaction",
            message=" ".join(["Transaction added successfully!", *validation.warnings]),
            entity_id=transaction.id,
            allocation=allocated,
            reference_date=reference_date,
        )

        self._audit(AuditEventBuilder.transaction_added(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            name=transaction.name,
            amount=transaction.amount,
        ))
        if allocated is not None:
            self._audit(AuditEventBuilder.emergency_allocation_applied(
                transaction_id=transaction.id,
                allocation_percent=fund.allocation,
                allocated=allocated,
                saved=fund.saved,
            ))
        return result

    def delete_transaction(
        self,
        transaction_id: str,
        reference_date: Optional[date] = None,
        missing_ok: bool = True,
    ) -> MutationResult:
        """
        Delete a transaction.

        Deleting an ID that does not exist is a reported no-op, or
        raises UnknownTransactionError when missing_ok is False.
        Emergency fund allocations already made are kept.
        """
        transaction = self._records.find_transaction(transaction_id)
        if transaction is None:
            if not missing_ok:
                self._audit(AuditEventBuilder.record_not_found("transaction", transaction_id, "delete_transaction"))
                raise UnknownTransactionError(transaction_id)
            return self._not_applied("delete_transaction", "transaction", transaction_id, reference_date)

        snapshot = self._snapshot()
        self._records.transactions = [
            t for t in self._records.transactions if t.id != transaction_id
        ]
        result = self._commit(
            snapshot,
            action="delete_transaction",
            message=f"Transaction deleted: {transaction.name or 'Other'}",
            entity_id=transaction_id,
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.transaction_deleted(transaction_id, transaction.name))
        return result

    # =========================================================================
    # Budget and emergency fund
    # =========================================================================

    def update_budget(self, amount: Any, reference_date: Optional[date] = None) -> MutationResult:
        """
        Replace the monthly budget. An amount of 0 clears it.

        Raises:
            InvalidAmountError: Negative or non-numeric amount
        """
        new_amount = self._validator.parse_budget_amount(amount)

        snapshot = self._snapshot()
        old_amount = self._records.budget.amount
        self._records.budget = Budget(amount=new_amount)

        result = self._commit(
            snapshot,
            action="update_budget",
            message="Budget updated successfully!",
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.budget_updated(old_amount, new_amount))
        return result

    def update_emergency_fund(
        self,
        target: Any,
        allocation: Any,
        saved: Any = None,
        reference_date: Optional[date] = None,
    ) -> MutationResult:
        """
        Change the emergency fund target and allocation percentage.

        Pass `saved` to correct the saved balance by hand; leave it
        as None to keep what has accumulated.
        """
        new_target, new_allocation, new_saved = self._validator.parse_emergency_settings(
            target, allocation, saved
        )

        snapshot = self._snapshot()
        current = self._records.emergency_fund
        self._records.emergency_fund = EmergencyFund(
            target=new_target,
            saved=current.saved if new_saved is None else new_saved,
            allocation=new_allocation,
        )
        fund = self._records.emergency_fund

        result = self._commit(
            snapshot,
            action="update_emergency_fund",
            message="Emergency fund settings updated!",
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.emergency_fund_updated(fund.target, fund.saved, fund.allocation))
        return result

    # =========================================================================
    # Savings goals
    # =========================================================================

    def create_goal(self, name: Optional[str], target: Any, reference_date: Optional[date] = None) -> MutationResult:
        """
        Create a savings goal with nothing saved yet.

        Raises:
            InvalidAmountError: Target missing or not positive
            InvalidRecordError: Name missing
        """
        goal = self._validator.build_goal(name, target)

        snapshot = self._snapshot()
        self._records.savings_goals.append(goal)

        result = self._commit(
            snapshot,
            action="create_goal",
            message="Savings goal created successfully!",
            entity_id=goal.id,
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.goal_created(goal.id, goal.name, goal.target))
        return result

    def add_to_goal(self, goal_id: str, amount: Any, reference_date: Optional[date] = None) -> MutationResult:
        """
        Add a contribution to a savings goal.

        Saving past the target is allowed; the goal then reports > 100%.

        Raises:
            InvalidAmountError: Zero, negative or non-numeric amount
            UnknownGoalError: No goal with this ID
        """
        contribution = self._validator.parse_contribution(amount)

        goal = self._records.find_goal(goal_id)
        if goal is None:
            self._audit(AuditEventBuilder.record_not_found("goal", goal_id, "add_to_goal"))
            raise UnknownGoalError(goal_id)

        snapshot = self._snapshot()
        goal.saved = goal.saved + contribution

        result = self._commit(
            snapshot,
            action="add_to_goal",
            message=f"Added {contribution} to {goal.name}",
            entity_id=goal_id,
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.goal_contribution_added(goal_id, goal.name, contribution, goal.saved))
        return result

    def delete_goal(
        self,
        goal_id: str,
        reference_date: Optional[date] = None,
        missing_ok: bool = True,
    ) -> MutationResult:
        """Delete a savings goal. Unknown IDs are a reported no-op unless missing_ok is False."""
        goal = self._records.find_goal(goal_id)
        if goal is None:
            if not missing_ok:
                self._audit(AuditEventBuilder.record_not_found("goal", goal_id, "delete_goal"))
                raise UnknownGoalError(goal_id)
            return self._not_applied("delete_goal", "goal", goal_id, reference_date)

        snapshot = self._snapshot()
        self._records.savings_goals = [
            g for g in self._records.savings_goals if g.id != goal_id
        ]

        result = self._commit(
            snapshot,
            action="delete_goal",
            message=f"Savings goal deleted: {goal.name}",
            entity_id=goal_id,
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.goal_deleted(goal_id, goal.name))
        return result

    # =========================================================================
    # Preferences and reset
    # =========================================================================

    def set_dark_mode(self, enabled: bool, reference_date: Optional[date] = None) -> MutationResult:
        snapshot = self._snapshot()
        self._records.preferences.dark_mode = bool(enabled)

        result = self._commit(
            snapshot,
            action="set_dark_mode",
            message=f"Dark mode {'enabled' if enabled else 'disabled'}",
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.preferences_updated({"dark_mode": bool(enabled)}))
        return result

    def reset_data(self, reference_date: Optional[date] = None) -> MutationResult:
        """
        Remove all transactions and goals and restore budget and
        emergency fund defaults. Preferences are kept.

        Ask the user before calling this; it cannot be undone.
        """
        snapshot = self._snapshot()
        transaction_count = len(self._records.transactions)
        goal_count = len(self._records.savings_goals)

        self._records = RecordSet(preferences=self._records.preferences)

        result = self._commit(
            snapshot,
            action="reset_data",
            message="All data has been reset.",
            reference_date=reference_date,
        )
        self._audit(AuditEventBuilder.data_reset(transaction_count, goal_count))
        return result


def create_tracker(
    use_file_storage: bool = True,
    data_dir: Optional[Path] = None,
) -> FinanceTracker:
    """
    Factory function to create a tracker with its collaborators.

    Args:
        use_file_storage: Whether to keep records on local disk.
                    Set to False for an in-memory tracker.
        data_dir: Overrides the configured storage directory

    Returns:
        A FinanceTracker with audit logging enabled
    """
    if use_file_storage:
        storage = JsonFileRecordStorage(data_dir)
    else:
        storage = InMemoryRecordStorage()

    audit_logger = AuditLogger(InMemoryAuditStorage())
    return FinanceTracker(storage=storage, audit_logger=audit_logger)
