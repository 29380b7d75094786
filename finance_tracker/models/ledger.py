"""
Core Data Models for the Finance Tracker

These models define the strict schemas for the three stores:
categories, transactions and monthly budget entries.

They are designed to:
1. Enforce field contracts at construction time
2. Be immutable once created (stores replace, never mutate)
3. Be hashable, so reports can key mappings by Category

DESIGN DECISION: Models are frozen pydantic v2 models. A store that needs
to change a record builds a new one with model_copy(), so a caller holding
a reference can never edit ledger state behind the store's back.
"""

from decimal import Decimal
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from finance_tracker.validation.fields import (
    MAX_CATEGORY_NAME_BYTES,
    MAX_NOTE_BYTES,
    clean_text,
    parse_date,
)


UNKNOWN_CATEGORY_NAME = "UNKNOWN"


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(int, Enum):
    """
    Direction of a transaction.

    The numeric values are part of the CSV and on-disk formats.
    """
    EXPENSE = 0
    INCOME = 1

    @classmethod
    def from_code(cls, code: object) -> "TransactionKind":
        """Map a loose user/CSV code to a kind: 1 is income, anything else expense."""
        try:
            return cls.INCOME if int(str(code).strip()) == 1 else cls.EXPENSE
        except ValueError:
            return cls.EXPENSE

    @property
    def label(self) -> str:
        return "IN" if self is TransactionKind.INCOME else "EX"


# =============================================================================
# ENTITIES
# =============================================================================

class Category(BaseModel):
    """
    A named bucket that transactions belong to.

    Names are not unique; the id is the only identity.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique category id, never reused"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name (at most 63 UTF-8 bytes)"
    )

    @field_validator("name", mode="before")
    @classmethod
    def fit_name(cls, v: str) -> str:
        """Trim and truncate to the fixed-width name field."""
        return clean_text(v, MAX_CATEGORY_NAME_BYTES)


class Transaction(BaseModel):
    """
    A single income or expense record.

    CRITICAL: amount is never negative. Direction is carried by kind.
    The ledger enforces amount > 0 on add and edit; only the lenient CSV
    import path may store a zero amount.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique transaction id, never reused"
    )
    date: str = Field(
        ...,
        description="Zero-padded YYYY-MM-DD date"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount, always non-negative"
    )
    category_id: int = Field(
        ...,
        description="Category this transaction belongs to"
    )
    kind: TransactionKind = Field(
        default=TransactionKind.EXPENSE,
        description="Expense or income"
    )
    note: str = Field(
        default="",
        description="Free text note (at most 255 UTF-8 bytes)"
    )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return parse_date(v)

    @field_validator("note", mode="before")
    @classmethod
    def fit_note(cls, v: str) -> str:
        return clean_text(v, MAX_NOTE_BYTES)

    @property
    def signed_spend(self) -> Decimal:
        """Net-spend contribution: expenses count up, income counts down."""
        if self.kind is TransactionKind.INCOME:
            return -self.amount
        return self.amount


class BudgetEntry(BaseModel):
    """
    A spending cap for one category in one calendar month.

    (category_id, year, month) is unique within the budget table.
    """
    model_config = ConfigDict(frozen=True)

    category_id: int
    year: int
    month: int = Field(
        ...,
        ge=1,
        le=12,
        description="Calendar month 1-12"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Budget amount for the month"
    )

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.category_id, self.year, self.month)
