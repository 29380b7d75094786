"""
Tests for the report engine

Month windows, summaries, budget reports and search, all computed over
in-memory stores.
"""

import pytest
from decimal import Decimal

from finance_tracker.errors import ValidationError
from finance_tracker.models import SearchCriteria, TransactionKind
from finance_tracker.queries import month_window


class TestMonthWindow:
    """Tests for month_window."""

    def test_regular_month(self):
        """Test a window runs to the first of the next month."""
        window = month_window(2024, 3)
        assert (window.start, window.end) == ("2024-03-01", "2024-04-01")

    def test_december_rolls_year(self):
        """Test December ends on January 1st of the next year."""
        window = month_window(2024, 12)
        assert window.end == "2025-01-01"

    def test_last_representable_month(self):
        """Test December 9999 still covers day 31."""
        window = month_window(9999, 12)
        assert window.contains("9999-12-31")

    def test_half_open(self):
        """Test the next month's first day is outside the window."""
        window = month_window(2024, 3)
        assert window.contains("2024-03-01")
        assert window.contains("2024-03-31")
        assert not window.contains("2024-04-01")
        assert not window.contains("2024-02-31")

    def test_bad_month(self):
        """Test months outside 1-12 are rejected."""
        with pytest.raises(ValidationError):
            month_window(2024, 13)


class TestSummaries:
    """Tests for monthly and per-category totals."""

    def test_single_expense_scenario(self, registry, ledger, engine):
        """Test one Groceries expense in March 2024."""
        groceries = registry.add("Groceries")
        ledger.add("2024-03-15", TransactionKind.EXPENSE, Decimal("45.50"), groceries)

        summary = engine.monthly_summary(2024, 3)
        assert summary.total_income == Decimal("0")
        assert summary.total_expense == Decimal("45.50")
        assert summary.net == Decimal("-45.50")
        assert engine.category_month_total(groceries, 2024, 3) == Decimal("45.50")

    def test_budget_report_scenario(self, registry, ledger, budgets, engine):
        """Test the budget report lists only budgeted categories."""
        groceries = registry.add("Groceries")
        ledger.add("2024-03-15", TransactionKind.EXPENSE, Decimal("45.50"), groceries)
        salary = registry.add("Salary")
        ledger.add("2024-03-01", TransactionKind.INCOME, Decimal("3000.00"), salary)
        budgets.set(groceries, 2024, 3, Decimal("200.00"))

        report = engine.budget_report(2024, 3)
        assert len(report.rows) == 1
        row = report.rows[0]
        assert row.category_name == "Groceries"
        assert row.budget_amount == Decimal("200.00")
        assert row.used == Decimal("45.50")
        assert row.remaining == Decimal("154.50")
        assert salary not in [r.category_id for r in report.rows]

    def test_next_month_boundary_excluded(self, registry, ledger, engine):
        """Test a transaction on the first of the next month is not counted."""
        groceries = registry.add("Groceries")
        ledger.add("2024-04-01", TransactionKind.EXPENSE, Decimal("10"), groceries)
        assert engine.monthly_summary(2024, 3).total_expense == Decimal("0")
        assert engine.category_month_total(groceries, 2024, 3) == Decimal("0")
        assert engine.category_month_total(groceries, 2024, 4) == Decimal("10")

    def test_income_counts_negative(self, groceries_month, engine):
        """Test an income-only category reports negative net spend."""
        _, salary = groceries_month
        assert engine.category_month_total(salary, 2024, 3) == Decimal("-3000.00")

    def test_category_totals_are_linear(self, groceries_month, registry, ledger, engine):
        """Test per-category totals sum to expenses minus incomes."""
        extra = registry.add("Transport")
        ledger.add("2024-03-20", TransactionKind.EXPENSE, Decimal("12.25"), extra)
        ledger.add("2024-03-21", TransactionKind.INCOME, Decimal("2.00"), extra)

        per_category = sum(
            (engine.category_month_total(c.id, 2024, 3) for c in registry.list()),
            Decimal("0"),
        )
        summary = engine.monthly_summary(2024, 3)
        assert per_category == summary.total_expense - summary.total_income

    def test_category_summary_includes_idle_categories(self, groceries_month, registry, engine):
        """Test categories with no activity are reported as zero."""
        idle = registry.add("Idle")
        totals = engine.category_summary(2024, 3)
        assert [c.name for c in totals] == ["Groceries", "Salary", "Idle"]
        assert totals[registry.get(idle)] == Decimal("0")
        assert totals[registry.get(groceries_month[0])] == Decimal("125.50")

    def test_other_months_untouched(self, groceries_month, engine):
        """Test a month without transactions is all zero."""
        summary = engine.monthly_summary(2024, 2)
        assert summary.total_income == summary.total_expense == Decimal("0")


class TestBudgetReport:
    """Tests for budget reports."""

    def test_empty_report_distinguishable(self, registry, engine):
        """Test a month with no budgets yields no rows."""
        registry.add("Groceries")
        report = engine.budget_report(2024, 3)
        assert report.has_budgets is False

    def test_zero_usage_row(self, registry, budgets, engine):
        """Test a budget with no spending still appears with used 0."""
        groceries = registry.add("Groceries")
        budgets.set(groceries, 2024, 5, Decimal("50"))
        report = engine.budget_report(2024, 5)
        assert report.has_budgets is True
        assert report.rows[0].used == Decimal("0")
        assert report.rows[0].remaining == Decimal("50")

    def test_over_budget(self, groceries_month, budgets, engine):
        """Test spending past the budget gives a negative remaining."""
        groceries, _ = groceries_month
        budgets.set(groceries, 2024, 3, Decimal("100"))
        row = engine.budget_report(2024, 3).rows[0]
        assert row.remaining == Decimal("-25.50")
        assert row.over_budget is True

    def test_orphaned_budget_named_unknown(self, registry, budgets, engine):
        """Test a budget whose category was removed is reported as UNKNOWN."""
        temp = registry.add("Temp")
        budgets.set(temp, 2024, 3, Decimal("5"))
        registry.remove(temp)
        assert engine.budget_report(2024, 3).rows[0].category_name == "UNKNOWN"

    def test_month_report_combines_all(self, groceries_month, engine):
        """Test the combined report carries all three sections."""
        report = engine.month_report(2024, 3)
        assert report.summary.total_income == Decimal("3000.00")
        assert len(report.category_totals) == 2
        assert report.budget.rows[0].used == Decimal("125.50")

    def test_reports_do_not_mutate(self, groceries_month, ledger, budgets, engine):
        """Test generating reports leaves the stores unchanged."""
        before = (ledger.snapshot(), budgets.snapshot())
        engine.month_report(2024, 3)
        engine.search(SearchCriteria(category_text="gro"))
        assert (ledger.snapshot(), budgets.snapshot()) == before


class TestSearch:
    """Tests for ReportEngine.search."""

    def test_no_criteria_returns_everything(self, groceries_month, engine):
        """Test empty criteria match every transaction."""
        assert len(engine.search(SearchCriteria())) == 3

    def test_date_range(self, groceries_month, engine):
        """Test date bounds are inclusive."""
        results = engine.search(SearchCriteria(start_date="2024-03-10", end_date="2024-03-25"))
        assert [t.date for t in results] == ["2024-03-10", "2024-03-25"]

    def test_category_substring_case_insensitive(self, groceries_month, engine):
        """Test category text matches part of the name in any case."""
        results = engine.search(SearchCriteria(category_text="GROC"))
        assert len(results) == 2

    def test_note_substring(self, groceries_month, engine):
        """Test note text matches part of the note."""
        results = engine.search(SearchCriteria(note_text="Weekly"))
        assert [t.note for t in results] == ["weekly shop"]

    def test_amount_bounds(self, groceries_month, engine):
        """Test min and max amounts are inclusive, 0 meaning unbounded."""
        results = engine.search(SearchCriteria(min_amount=Decimal("45.50"), max_amount=Decimal("80")))
        assert [t.amount for t in results] == [Decimal("45.50"), Decimal("80.00")]
        results = engine.search(SearchCriteria(min_amount=Decimal("100"), max_amount=Decimal("0")))
        assert [t.amount for t in results] == [Decimal("3000.00")]

    def test_criteria_combine(self, groceries_month, engine):
        """Test all supplied criteria must hold."""
        results = engine.search(SearchCriteria(category_text="groceries", min_amount=Decimal("50")))
        assert [t.note for t in results] == ["market"]
