"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the stores, reports and gateways conforms to
these schemas.
"""

from finance_tracker.models.ledger import (
    UNKNOWN_CATEGORY_NAME,
    BudgetEntry,
    Category,
    Transaction,
    TransactionKind,
)
from finance_tracker.models.reports import (
    BudgetReport,
    BudgetReportRow,
    IngestResult,
    MonthlySummary,
    MonthReport,
    MonthWindow,
    SearchCriteria,
    TransactionEdit,
)
from finance_tracker.models.exchange import (
    CSV_HEADER,
    CsvTransactionRow,
    ImportReport,
    RowValidationResult,
    ValidationIssue,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger entities
    "UNKNOWN_CATEGORY_NAME",
    "BudgetEntry",
    "Category",
    "Transaction",
    "TransactionKind",
    # Reports and results
    "BudgetReport",
    "BudgetReportRow",
    "IngestResult",
    "MonthlySummary",
    "MonthReport",
    "MonthWindow",
    "SearchCriteria",
    "TransactionEdit",
    # CSV exchange
    "CSV_HEADER",
    "CsvTransactionRow",
    "ImportReport",
    "RowValidationResult",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
