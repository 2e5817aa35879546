"""Validation package."""

from spendvista.validation.validator import (
    InvalidAmountError,
    InvalidDateError,
    InvalidRecordError,
    RecordValidationError,
    RecordValidator,
)

__all__ = [
    "InvalidAmountError",
    "InvalidDateError",
    "InvalidRecordError",
    "RecordValidationError",
    "RecordValidator",
]
