"""Shared fixtures for the finance tracker tests."""

from decimal import Decimal

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import StorageSettings
from finance_tracker.models import TransactionKind
from finance_tracker.orchestrator import FinanceTracker
from finance_tracker.queries import ReportEngine
from finance_tracker.services import BinaryFileStorage, InMemoryLedgerStorage
from finance_tracker.stores import BudgetTable, CategoryRegistry, TransactionLedger


@pytest.fixture
def registry():
    return CategoryRegistry()


@pytest.fixture
def ledger(registry):
    return TransactionLedger(registry)


@pytest.fixture
def budgets(registry):
    return BudgetTable(registry)


@pytest.fixture
def engine(registry, ledger, budgets):
    return ReportEngine(registry, ledger, budgets)


@pytest.fixture
def groceries_month(registry, ledger, budgets):
    """
    March 2024 with a Groceries budget of 200, two grocery expenses and a salary.

    Returns the (groceries_id, salary_id) pair.
    """
    groceries = registry.add("Groceries")
    salary = registry.add("Salary")
    budgets.set(groceries, 2024, 3, Decimal("200"))
    ledger.add("2024-03-03", TransactionKind.EXPENSE, Decimal("45.50"), groceries, "weekly shop")
    ledger.add("2024-03-10", TransactionKind.EXPENSE, Decimal("80.00"), groceries, "market")
    ledger.add("2024-03-25", TransactionKind.INCOME, Decimal("3000.00"), salary, "march pay")
    return groceries, salary


@pytest.fixture
def storage_settings(tmp_path):
    return StorageSettings(data_dir=tmp_path, obfuscation_key=None)


@pytest.fixture
def file_storage(storage_settings):
    return BinaryFileStorage(storage_settings)


@pytest.fixture
def memory_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def tracker(memory_storage):
    return FinanceTracker(storage=memory_storage, audit_logger=AuditLogger())
