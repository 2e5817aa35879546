"""Services package."""

from spendvista.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileRecordStorage,
    NotFoundError,
    RecordStorageInterface,
    StorageError,
    UnknownGoalError,
    UnknownTransactionError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
    "JsonFileRecordStorage",
    "NotFoundError",
    "RecordStorageInterface",
    "StorageError",
    "UnknownGoalError",
    "UnknownTransactionError",
]
