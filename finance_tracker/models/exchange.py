"""
CSV Exchange Models

Schemas for the rows read during import and the report handed back once
an import finishes.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from finance_tracker.models.ledger import Category, TransactionKind


CSV_HEADER = ["id", "date", "type", "amount", "category", "note"]


class CsvTransactionRow(BaseModel):
    """
    One import row after column splitting, before it touches the ledger.

    Fields hold raw text; the row validator decides what is usable.
    """

    line: int = Field(..., ge=1, description="1-based line number in the file")
    date: str
    kind: TransactionKind
    amount_text: str
    category_name: str
    note: str = ""


class ValidationIssue(BaseModel):
    """A single problem found while validating an import row."""

    line: Optional[int] = Field(
        default=None,
        description="Line number the issue was found on"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_date', 'unparseable_amount')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity; errors skip the row"
    )


class RowValidationResult(BaseModel):
    """Result of validating one import row."""

    row: CsvTransactionRow
    amount: Decimal = Decimal("0")
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)


class ImportReport(BaseModel):
    """
    Result of a CSV import.

    Skipped rows are reported by line number in issues (severity "error");
    rows imported leniently (unparseable amount read as 0) appear as warnings.
    """

    source: str
    imported_count: int = 0
    transaction_ids: list[int] = Field(default_factory=list)
    created_categories: list[Category] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def skipped_lines(self) -> list[int]:
        return sorted({
            issue.line for issue in self.issues
            if issue.severity == "error" and issue.line is not None
        })

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")
