"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep records on local disk for the app
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple. The whole record set is small
enough to load and save in one go, so there are no per-record queries.
"""

from abc import ABC, abstractmethod

from spendvista.models.audit import AuditEvent
from spendvista.models.records import RecordSet


class RecordStorageInterface(ABC):
    """
    Abstract interface for record storage.

    Any storage implementation (local files, browser-style key-value
    store, etc.) must implement these methods.
    """

    @abstractmethod
    def load(self) -> RecordSet:
        """
        Load the full record set.

        Absent or malformed stored values are replaced by their
        defaults; loading never fails because of bad stored data.

        Returns:
            The stored records
        """
        pass

    @abstractmethod
    def save(self, records: RecordSet) -> None:
        """
        Persist the full record set, replacing what was stored.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored value."""
        pass

    @property
    def load_issues(self) -> list[tuple[str, str]]:
        """(key, reason) for each value replaced by a default on the last load."""
        return []


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific record, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"No {entity_type} with id {entity_id}")


class UnknownTransactionError(NotFoundError):
    """A mutation referenced a transaction that does not exist."""

    def __init__(self, transaction_id: str):
        super().__init__("transaction", transaction_id)


class UnknownGoalError(NotFoundError):
    """A mutation referenced a savings goal that does not exist."""

    def __init__(self, goal_id: str):
        super().__init__("goal", goal_id)
