"""
Data Models Package

This package contains all Pydantic models used in SpendVista.
Records are what the user enters; metrics are what we derive from them.
"""

from spendvista.models.records import (
    SCHEMA_VERSION,
    Budget,
    EmergencyFund,
    Preferences,
    RecordSet,
    SavingsGoal,
    Transaction,
    TransactionType,
    generate_record_id,
)
from spendvista.models.metrics import (
    BudgetStatus,
    DashboardSnapshot,
    EmergencyStatus,
    GoalProgress,
    GoalStatus,
    Metrics,
    MonthlyTotals,
    MutationResult,
)
from spendvista.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from spendvista.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "SCHEMA_VERSION",
    "Budget",
    "EmergencyFund",
    "Preferences",
    "RecordSet",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    "generate_record_id",
    # Derived models
    "BudgetStatus",
    "DashboardSnapshot",
    "EmergencyStatus",
    "GoalProgress",
    "GoalStatus",
    "Metrics",
    "MonthlyTotals",
    "MutationResult",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
