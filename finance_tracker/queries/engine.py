"""
Query and Report Engine

DESIGN DECISION: Every operation here is a pure read over the three
stores. Nothing in this module mutates state, so reports can be generated
at any time without side effects.

MONTH WINDOWS: a (year, month) covers the half-open range
[YYYY-MM-01, first day of next month). A transaction dated on the first
day of the next month is excluded.

SIGN CONVENTION: category totals are net spend. Expenses count as
+amount and income as -amount, so a category that only receives income
reports a negative total.
"""

from decimal import Decimal
from typing import Iterable

from finance_tracker.models.ledger import Category, Transaction, TransactionKind
from finance_tracker.models.reports import (
    ZERO,
    BudgetReport,
    BudgetReportRow,
    MonthlySummary,
    MonthReport,
    MonthWindow,
    SearchCriteria,
)
from finance_tracker.stores.budgets import BudgetTable
from finance_tracker.stores.categories import CategoryRegistry
from finance_tracker.stores.transactions import TransactionLedger
from finance_tracker.validation.fields import MAX_YEAR, validate_month


def month_window(year: int, month: int) -> MonthWindow:
    """
    Build the half-open window for one calendar month.

    Raises:
        ValidationError: if month is outside 1-12
    """
    validate_month(month)
    start = f"{year:04d}-{month:02d}-01"
    if month == 12 and year >= MAX_YEAR:
        # Past the last representable day
        end = f"{year:04d}-12-32"
    elif month == 12:
        end = f"{year + 1:04d}-01-01"
    else:
        end = f"{year:04d}-{month + 1:02d}-01"
    return MonthWindow(year=year, month=month, start=start, end=end)


class ReportEngine:
    """
    Produces summaries and searches over the ledger stores.

    GUARANTEES:
    - Only reads; never mutates a store
    - Every category is reported, including ones with no activity
    - An empty budget report is distinguishable from an all-zero one
    """

    def __init__(
        self,
        categories: CategoryRegistry,
        ledger: TransactionLedger,
        budgets: BudgetTable,
    ):
        self._categories = categories
        self._ledger = ledger
        self._budgets = budgets

    def category_month_total(self, category_id: int, year: int, month: int) -> Decimal:
        """Net spend for one category in one month (expense +, income -)."""
        window = month_window(year, month)
        return self._net_spend(
            t for t in self._in_window(window) if t.category_id == category_id
        )

    def monthly_summary(self, year: int, month: int) -> MonthlySummary:
        """Total income, total expense and net savings across all categories."""
        window = month_window(year, month)
        income = ZERO
        expense = ZERO
        for transaction in self._in_window(window):
            if transaction.kind is TransactionKind.INCOME:
                income += transaction.amount
            else:
                expense += transaction.amount

        return MonthlySummary(
            year=year,
            month=month,
            total_income=income,
            total_expense=expense,
        )

    def category_summary(self, year: int, month: int) -> dict[Category, Decimal]:
        """Net spend per category, in registry order, zero-activity included."""
        window = month_window(year, month)
        totals: dict[int, Decimal] = {}
        for transaction in self._in_window(window):
            totals[transaction.category_id] = (
                totals.get(transaction.category_id, ZERO) + transaction.signed_spend
            )

        return {
            category: totals.get(category.id, ZERO)
            for category in self._categories.list()
        }

    def budget_report(self, year: int, month: int) -> BudgetReport:
        """
        Budget versus actual for categories budgeted in exactly this month.

        Categories without a budget entry for the month are not reported.
        """
        validate_month(month)
        rows = []
        for entry in self._budgets.for_month(year, month):
            rows.append(BudgetReportRow(
                category_id=entry.category_id,
                category_name=self._categories.name_of(entry.category_id),
                budget_amount=entry.amount,
                used=self.category_month_total(entry.category_id, year, month),
            ))

        return BudgetReport(year=year, month=month, rows=rows)

    def month_report(self, year: int, month: int) -> MonthReport:
        """Combined monthly, category and budget report for one month."""
        return MonthReport(
            summary=self.monthly_summary(year, month),
            category_totals=self.category_summary(year, month),
            budget=self.budget_report(year, month),
        )

    def search(self, criteria: SearchCriteria) -> list[Transaction]:
        """
        Find transactions matching every supplied criterion.

        Text matches are case-insensitive substrings. An amount bound of 0
        means no bound on that side.
        """
        category_text = criteria.category_text.casefold() if criteria.category_text else None
        note_text = criteria.note_text.casefold() if criteria.note_text else None

        results = []
        for transaction in self._ledger.list(criteria.start_date, criteria.end_date):
            if criteria.min_amount > 0 and transaction.amount < criteria.min_amount:
                continue
            if criteria.max_amount > 0 and transaction.amount > criteria.max_amount:
                continue
            if category_text is not None:
                name = self._categories.name_of(transaction.category_id)
                if category_text not in name.casefold():
                    continue
            if note_text is not None and note_text not in transaction.note.casefold():
                continue
            results.append(transaction)

        return results

    def _in_window(self, window: MonthWindow) -> Iterable[Transaction]:
        return (t for t in self._ledger.list() if window.contains(t.date))

    @staticmethod
    def _net_spend(transactions: Iterable[Transaction]) -> Decimal:
        return sum((t.signed_spend for t in transactions), ZERO)
