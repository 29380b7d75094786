"""
Main Orchestrator for the Finance Tracker

This module ties together the stores, the report engine, persistence,
CSV exchange and audit logging behind one object the console drives.

DESIGN DECISION: The orchestrator enforces the boundaries:
- The stores never touch files; only load() and save() do
- Every mutation, report and file operation is audited
- Core errors are audited and then re-raised unchanged, so the caller
  decides how to present them

This is the "glue" the console and tests talk to. It adds no business
rules of its own.
"""

from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional, Union
from uuid import UUID

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import Settings, get_settings
from finance_tracker.errors import LedgerError, ValidationError
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.exchange import ImportReport
from finance_tracker.models.ledger import BudgetEntry, Category, Transaction, TransactionKind
from finance_tracker.models.reports import MonthReport, SearchCriteria, TransactionEdit
from finance_tracker.queries import ReportEngine
from finance_tracker.services.exchange import ExchangeError, export_csv, import_csv
from finance_tracker.services.persistence import (
    BinaryFileStorage,
    InMemoryLedgerStorage,
    LedgerSnapshot,
    LedgerStorageInterface,
    StorageError,
)
from finance_tracker.stores import BudgetTable, CategoryRegistry, TransactionLedger
from finance_tracker.validation.validator import CsvRowValidator


class FinanceTracker:
    """
    One ledger session: three stores, a report engine and their storage.

    Usage:
        tracker = create_tracker()
        tracker.load()
        food = tracker.add_category("Groceries")
        tracker.add_transaction("2024-03-15", TransactionKind.EXPENSE, Decimal("45.50"), food)
        report = tracker.month_report(2024, 3)
        tracker.save()
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[CsvRowValidator] = None,
    ):
        self.categories = CategoryRegistry()
        self.ledger = TransactionLedger(self.categories)
        self.budgets = BudgetTable(self.categories)
        self.reports = ReportEngine(self.categories, self.ledger, self.budgets)

        self._storage = storage or InMemoryLedgerStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or CsvRowValidator()

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, name: str, correlation_id: Optional[UUID] = None) -> int:
        with self._audited("add_category", correlation_id):
            category_id = self.categories.add(name)
        self._audit_logger.log(AuditEventBuilder.category_added(
            category_id=category_id,
            name=self.categories.name_of(category_id),
            correlation_id=correlation_id,
        ))
        return category_id

    def rename_category(
        self,
        category_id: int,
        new_name: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> Category:
        """Rename a category. A blank name keeps the current one."""
        with self._audited("rename_category", correlation_id):
            old_name = self.categories.name_of(category_id)
            category = self.categories.rename(category_id, new_name)
        if category.name != old_name:
            self._audit_logger.log(AuditEventBuilder.category_renamed(
                category_id=category_id,
                old_name=old_name,
                new_name=category.name,
                correlation_id=correlation_id,
            ))
        return category

    def remove_category(self, category_id: int, correlation_id: Optional[UUID] = None) -> None:
        with self._audited("remove_category", correlation_id):
            self.categories.remove(category_id)
        self._audit_logger.log(AuditEventBuilder.category_removed(
            category_id=category_id,
            correlation_id=correlation_id,
        ))

    def list_categories(self) -> list[Category]:
        return self.categories.list()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        date: str,
        kind: TransactionKind,
        amount: Decimal,
        category_id: int,
        note: Optional[str] = "",
        correlation_id: Optional[UUID] = None,
    ) -> int:
        with self._audited("add_transaction", correlation_id):
            transaction_id = self.ledger.add(date, kind, amount, category_id, note)
        transaction = self.ledger.find(transaction_id)
        self._audit_logger.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            kind=transaction.kind.label,
            amount=str(transaction.amount),
            category_id=category_id,
            correlation_id=correlation_id,
        ))
        return transaction_id

    def edit_transaction(
        self,
        transaction_id: int,
        date: Optional[str] = None,
        kind: Optional[TransactionKind] = None,
        amount: Optional[Decimal] = None,
        category_id: Optional[int] = None,
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionEdit:
        """Edit a transaction; None for a field keeps its current value."""
        with self._audited("edit_transaction", correlation_id):
            edit = self.ledger.edit(
                transaction_id,
                date=date,
                kind=kind,
                amount=amount,
                category_id=category_id,
                note=note,
            )
        self._audit_logger.log(AuditEventBuilder.transaction_edited(
            transaction_id=transaction_id,
            changed_fields=edit.changed_fields,
            warnings=edit.warnings,
            correlation_id=correlation_id,
        ))
        return edit

    def remove_transaction(self, transaction_id: int, correlation_id: Optional[UUID] = None) -> None:
        with self._audited("remove_transaction", correlation_id):
            self.ledger.remove(transaction_id)
        self._audit_logger.log(AuditEventBuilder.transaction_removed(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def list_transactions(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """Transactions in ledger order, optionally within an inclusive date range."""
        with self._audited("list_transactions", correlation_id):
            return list(self.ledger.list(start, end))

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def set_budget(
        self,
        category_id: int,
        year: int,
        month: int,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetEntry:
        with self._audited("set_budget", correlation_id):
            entry = self.budgets.set(category_id, year, month, amount)
        self._audit_logger.log(AuditEventBuilder.budget_set(
            category_id=category_id,
            year=year,
            month=month,
            amount=str(entry.amount),
            correlation_id=correlation_id,
        ))
        return entry

    def list_budgets(self) -> list[BudgetEntry]:
        return self.budgets.list()

    # -------------------------------------------------------------------------
    # Reports and search
    # -------------------------------------------------------------------------

    def month_report(
        self,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None,
    ) -> MonthReport:
        """Monthly summary, per-category totals and budget report in one go."""
        with self._audited("month_report", correlation_id):
            report = self.reports.month_report(year, month)
        self._audit_logger.log(AuditEventBuilder.report_generated(
            report="month",
            year=year,
            month=month,
            correlation_id=correlation_id,
        ))
        return report

    def search(
        self,
        criteria: SearchCriteria,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        with self._audited("search", correlation_id):
            results = self.reports.search(criteria)
        self._audit_logger.log(AuditEventBuilder.search_executed(
            criteria=criteria.model_dump(mode="json"),
            result_count=len(results),
            correlation_id=correlation_id,
        ))
        return results

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> LedgerSnapshot:
        """
        Replace all in-memory state with what storage holds.

        Categories are restored first so later stores resolve against them.

        Raises:
            StorageError: if the stored data cannot be read
        """
        with self._audited("load"):
            snapshot = self._storage.load()
            self.categories.restore(snapshot.categories)
            self.ledger.restore(snapshot.transactions)
            self.budgets.restore(snapshot.budgets)
        self._audit_logger.log(AuditEventBuilder.data_loaded(
            categories=len(snapshot.categories),
            transactions=len(snapshot.transactions),
            budgets=len(snapshot.budgets),
        ))
        return snapshot

    def save(self) -> LedgerSnapshot:
        """
        Persist all three stores.

        Raises:
            StorageError: if any file cannot be written
        """
        snapshot = LedgerSnapshot(
            categories=self.categories.snapshot(),
            transactions=self.ledger.snapshot(),
            budgets=self.budgets.snapshot(),
        )
        with self._audited("save"):
            self._storage.save(snapshot)
        self._audit_logger.log(AuditEventBuilder.data_saved(
            categories=len(snapshot.categories),
            transactions=len(snapshot.transactions),
            budgets=len(snapshot.budgets),
            obfuscated=self.obfuscation_enabled,
        ))
        return snapshot

    @property
    def obfuscation_enabled(self) -> bool:
        obfuscation = getattr(self._storage, "obfuscation", None)
        return obfuscation is not None and obfuscation.enabled

    def enable_obfuscation(self, key: str) -> None:
        """
        Turn on single-byte XOR obfuscation for subsequent saves and loads.

        Raises:
            ValidationError: if the key is not a single non-NUL byte character
            StorageError: if the storage does not obfuscate
        """
        with self._audited("enable_obfuscation"):
            obfuscation = self._require_obfuscation()
            if key is None or len(key) != 1 or not 0 < ord(key) < 256:
                raise ValidationError("Obfuscation key must be a single character")
            obfuscation.enable(ord(key))
        self._audit_logger.log(AuditEventBuilder.obfuscation_toggled(enabled=True))

    def disable_obfuscation(self) -> None:
        with self._audited("disable_obfuscation"):
            self._require_obfuscation().disable()
        self._audit_logger.log(AuditEventBuilder.obfuscation_toggled(enabled=False))

    # -------------------------------------------------------------------------
    # CSV exchange
    # -------------------------------------------------------------------------

    def export_csv(
        self,
        path: Union[str, Path],
        correlation_id: Optional[UUID] = None,
    ) -> int:
        with self._audited("export_csv", correlation_id):
            count = export_csv(path, self.ledger, self.categories)
        self._audit_logger.log(AuditEventBuilder.export_completed(
            destination=str(path),
            exported=count,
            correlation_id=correlation_id,
        ))
        return count

    def import_csv(
        self,
        path: Union[str, Path],
        correlation_id: Optional[UUID] = None,
    ) -> ImportReport:
        """
        Import transactions from CSV; bad rows are reported, not raised.

        Raises:
            ExchangeError: if the file cannot be read at all
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._audited("import_csv", correlation_id):
            report = import_csv(path, self.ledger, self._validator)

        for issue in report.issues:
            if issue.severity == "error":
                self._audit_logger.log(AuditEventBuilder.import_row_skipped(
                    source=report.source,
                    line=issue.line,
                    reason=issue.message,
                    correlation_id=correlation_id,
                ))
        for category in report.created_categories:
            self._audit_logger.log(AuditEventBuilder.category_added(
                category_id=category.id,
                name=category.name,
                correlation_id=correlation_id,
            ))
        self._audit_logger.log(AuditEventBuilder.import_completed(
            source=report.source,
            imported=report.imported_count,
            skipped=len(report.skipped_lines),
            created_categories=[c.name for c in report.created_categories],
            correlation_id=correlation_id,
        ))
        return report

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_obfuscation(self):
        obfuscation = getattr(self._storage, "obfuscation", None)
        if obfuscation is None:
            raise StorageError("The configured storage does not support obfuscation")
        return obfuscation

    @contextmanager
    def _audited(self, operation: str, correlation_id: Optional[UUID] = None) -> Iterator[None]:
        try:
            yield
        except LedgerError as e:
            self._audit_logger.log_validation_failed(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except (StorageError, ExchangeError) as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                correlation_id=correlation_id,
            )
            raise


def create_tracker(settings: Optional[Settings] = None) -> FinanceTracker:
    """
    Factory function to create a tracker backed by binary files.

    Args:
        settings: Application settings; defaults to get_settings()

    Returns:
        A FinanceTracker that has not loaded anything yet
    """
    settings = settings or get_settings()
    storage = BinaryFileStorage(settings.storage)
    return FinanceTracker(storage=storage, audit_logger=AuditLogger())
