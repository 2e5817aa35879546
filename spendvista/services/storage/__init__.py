"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Records are kept as independently keyed JSON values, either in memory
or as files in a local data directory.
"""

from spendvista.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    RecordStorageInterface,
    StorageError,
    UnknownGoalError,
    UnknownTransactionError,
)
from spendvista.services.storage.keyvalue import (
    ALL_KEYS,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileRecordStorage,
    KeyValueRecordStorage,
    parse_money,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "UnknownGoalError",
    "UnknownTransactionError",
    # Key-value implementations
    "ALL_KEYS",
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
    "JsonFileRecordStorage",
    "KeyValueRecordStorage",
    "parse_money",
]
