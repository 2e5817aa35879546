"""
Core Record Models for SpendVista

These models define the strict schemas for every record the user creates.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for local storage

DESIGN DECISION: Money is Decimal with at most two decimal places.
Floats drift when the emergency fund accumulates allocations indefinitely.
"""

import time
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


SCHEMA_VERSION = 1
DEFAULT_EMERGENCY_ALLOCATION = 10

Money = Annotated[Decimal, Field(ge=0, decimal_places=2)]
PositiveMoney = Annotated[Decimal, Field(gt=0, decimal_places=2)]

_last_issued_id = 0


def generate_record_id() -> str:
    """
    Return a millisecond timestamp as a record ID.

    IDs issued within the same millisecond are bumped forward so
    two records created back to back never share an ID.
    """
    global _last_issued_id
    candidate = int(time.time() * 1000)
    if candidate <= _last_issued_id:
        candidate = _last_issued_id + 1
    _last_issued_id = candidate
    return str(candidate)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single dated income or expense.

    Transactions are immutable once created. The only way to change
    one is to delete it and record a new one.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        default_factory=generate_record_id,
        min_length=1,
        description="Timestamp-derived identifier"
    )
    type: TransactionType
    name: str = Field(
        default="",
        max_length=200,
        description="Free text; its first word doubles as the category"
    )
    amount: PositiveMoney
    date: date

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


class Budget(BaseModel):
    """The spending ceiling for the current month."""
    model_config = ConfigDict(validate_assignment=True)

    amount: Money = Decimal("0")


class EmergencyFund(BaseModel):
    """
    A savings pool with a target and an automatic income allocation.

    `saved` grows both from manual edits and from `allocation` percent
    of every income transaction at the moment it is recorded.
    """
    model_config = ConfigDict(validate_assignment=True)

    target: Money = Decimal("0")
    saved: Money = Decimal("0")
    allocation: int = Field(
        default=DEFAULT_EMERGENCY_ALLOCATION,
        ge=0,
        le=100,
        description="Percent of each income added to saved"
    )


class SavingsGoal(BaseModel):
    """A named savings target with manual contributions."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: str = Field(
        default_factory=generate_record_id,
        min_length=1,
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Goal name shown on the goal card"
    )
    target: PositiveMoney
    saved: Money = Decimal("0")


class Preferences(BaseModel):
    """User interface preferences."""
    model_config = ConfigDict(validate_assignment=True)

    dark_mode: bool = False


class RecordSet(BaseModel):
    """
    Everything the user has recorded.

    This is the single mutable object the tracker owns and hands to
    the metrics engine. Transactions keep insertion order.
    """
    model_config = ConfigDict(validate_assignment=True)

    schema_version: int = SCHEMA_VERSION
    transactions: list[Transaction] = Field(default_factory=list)
    budget: Budget = Field(default_factory=Budget)
    emergency_fund: EmergencyFund = Field(default_factory=EmergencyFund)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def find_goal(self, goal_id: str) -> Optional[SavingsGoal]:
        for goal in self.savings_goals:
            if goal.id == goal_id:
                return goal
        return None
