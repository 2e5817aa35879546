"""
Audit Models for SpendVista

Every change to the user's records is logged for audit purposes.
This provides:
1. Traceability of every mutation
2. Debugging information when stored data had to be replaced by defaults
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_REJECTED = "transaction_rejected"
    EMERGENCY_ALLOCATION_APPLIED = "emergency_allocation_applied"

    # Budget and emergency fund
    BUDGET_UPDATED = "budget_updated"
    EMERGENCY_FUND_UPDATED = "emergency_fund_updated"

    # Savings goals
    GOAL_CREATED = "goal_created"
    GOAL_CONTRIBUTION_ADDED = "goal_contribution_added"
    GOAL_DELETED = "goal_deleted"

    # Misc user actions
    PREFERENCES_UPDATED = "preferences_updated"
    DATA_RESET = "data_reset"
    RECORD_NOT_FOUND = "record_not_found"

    # Persistence
    STORAGE_FALLBACK = "storage_fallback"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every mutation of the record set creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'transaction', 'goal', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, "income", "Salary", "1000.00")
        event = AuditEventBuilder.goal_deleted(goal_id, "Holiday")
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        transaction_type: str,
        name: str,
        amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{transaction_type.capitalize()} recorded: {name} - {amount}",
            details={
                "type": transaction_type,
                "name": name,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            description=f"Transaction rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def emergency_allocation_applied(
        transaction_id: str,
        allocation_percent: int,
        allocated: Decimal,
        saved: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMERGENCY_ALLOCATION_APPLIED,
            entity_type="emergency_fund",
            entity_id=transaction_id,
            description=f"{allocation_percent}% of income moved to emergency fund: {allocated}",
            details={
                "allocation_percent": allocation_percent,
                "allocated": str(allocated),
                "saved": str(saved),
            },
        )

    @staticmethod
    def budget_updated(old_amount: Decimal, new_amount: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            description=f"Monthly budget set to {new_amount}",
            details={
                "old_amount": str(old_amount),
                "new_amount": str(new_amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def emergency_fund_updated(
        target: Decimal,
        saved: Decimal,
        allocation: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMERGENCY_FUND_UPDATED,
            entity_type="emergency_fund",
            description=f"Emergency fund target {target}, allocation {allocation}%",
            details={
                "target": str(target),
                "saved": str(saved),
                "allocation": allocation,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_created(goal_id: str, name: str, target: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal created: {name} ({target})",
            details={"name": name, "target": str(target)},
            is_user_action=True,
        )

    @staticmethod
    def goal_contribution_added(
        goal_id: str,
        name: str,
        amount: Decimal,
        saved: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTION_ADDED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Added {amount} to {name}",
            details={"amount": str(amount), "saved": str(saved)},
            is_user_action=True,
        )

    @staticmethod
    def goal_deleted(goal_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_DELETED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Savings goal deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def preferences_updated(changes: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="preferences",
            description="Preferences updated",
            details=changes,
            is_user_action=True,
        )

    @staticmethod
    def data_reset(transaction_count: int, goal_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_RESET,
            severity=AuditSeverity.WARNING,
            description="All records reset to defaults",
            details={
                "transactions_removed": transaction_count,
                "goals_removed": goal_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_not_found(entity_type: str, entity_id: str, action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{action}: no {entity_type} with id {entity_id}",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def storage_fallback(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FALLBACK,
            severity=AuditSeverity.WARNING,
            description=f"Stored value for {key} replaced by default",
            error_message=reason,
            details={"key": key},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
