"""
Report, Query and Result Models

Everything the query/report engine and the stores hand back to callers,
beyond the entities themselves.

DESIGN DECISION: Results are models rather than printed text. The core
never formats output for a terminal; the console does that.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from finance_tracker.models.ledger import Category, Transaction
from finance_tracker.validation.fields import is_blank, parse_date


ZERO = Decimal("0")


# =============================================================================
# DATE WINDOWS
# =============================================================================

class MonthWindow(BaseModel):
    """
    Half-open date window [start, end) covering one calendar month.

    Membership compares zero-padded ISO strings lexicographically, which
    matches calendar order.
    """
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    start: str
    end: str

    def contains(self, date: str) -> bool:
        return self.start <= date < self.end


# =============================================================================
# REPORTS
# =============================================================================

class MonthlySummary(BaseModel):
    """Income, expense and net savings over one month, across all categories."""

    year: int
    month: int
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO

    @computed_field
    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


class BudgetReportRow(BaseModel):
    """Budget versus actual net spend for one category in one month."""

    category_id: int
    category_name: str
    budget_amount: Decimal
    used: Decimal

    @computed_field
    @property
    def remaining(self) -> Decimal:
        return self.budget_amount - self.used

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


class BudgetReport(BaseModel):
    """
    Budget report for one month.

    An empty report (no budget entries for the month) is distinct from a
    report whose rows are all zero: check has_budgets.
    """

    year: int
    month: int
    rows: list[BudgetReportRow] = Field(default_factory=list)

    @property
    def has_budgets(self) -> bool:
        return len(self.rows) > 0


class MonthReport(BaseModel):
    """Combined monthly, per-category and budget report."""

    summary: MonthlySummary
    category_totals: dict[Category, Decimal]
    budget: BudgetReport


# =============================================================================
# SEARCH
# =============================================================================

class SearchCriteria(BaseModel):
    """
    Independently optional transaction search criteria, ANDed together.

    Blank strings mean "no filter". An amount bound of 0 means unbounded on
    that side, so a literal 0 can never be used as a real bound.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    category_text: Optional[str] = None
    min_amount: Decimal = ZERO
    max_amount: Decimal = ZERO
    note_text: Optional[str] = None

    @field_validator("start_date", "end_date", "category_text", "note_text", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if is_blank(v):
            return None
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return parse_date(v)

    @field_validator("min_amount", "max_amount", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return ZERO if v is None else v


# =============================================================================
# STORE OPERATION RESULTS
# =============================================================================

class TransactionEdit(BaseModel):
    """
    Outcome of editing a transaction.

    Rejected date input is reported in warnings and the old date kept.
    A category id that does not exist is ignored without a warning.
    """

    transaction: Transaction
    changed_fields: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class IngestResult(BaseModel):
    """Outcome of inserting a transaction by category name."""

    transaction: Transaction
    created_category: Optional[Category] = None
