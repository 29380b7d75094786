"""
Tests for CSV import and export

Files are written under tmp_path.
"""

import pytest
from decimal import Decimal

from finance_tracker.models import TransactionKind
from finance_tracker.services import ExchangeError, export_csv, import_csv
from finance_tracker.stores import CategoryRegistry, TransactionLedger


def write_csv(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestExport:
    """Tests for export_csv."""

    def test_header_and_rows(self, tmp_path, registry, ledger):
        """Test the export layout, two-decimal amounts and type codes."""
        groceries = registry.add("Groceries")
        ledger.add("2024-03-15", TransactionKind.EXPENSE, Decimal("45.5"), groceries, "weekly shop")
        ledger.add("2024-03-01", TransactionKind.INCOME, Decimal("3000"), groceries)

        path = tmp_path / "out.csv"
        assert export_csv(path, ledger, registry) == 2
        assert path.read_text(encoding="utf-8").splitlines() == [
            "id,date,type,amount,category,note",
            "1,2024-03-15,0,45.50,Groceries,weekly shop",
            "2,2024-03-01,1,3000.00,Groceries,",
        ]

    def test_empty_ledger_writes_header(self, tmp_path, registry, ledger):
        """Test an empty ledger still produces the header."""
        path = tmp_path / "out.csv"
        assert export_csv(path, ledger, registry) == 0
        assert path.read_text(encoding="utf-8") == "id,date,type,amount,category,note\n"

    def test_comma_in_note_is_quoted(self, tmp_path, registry, ledger):
        """Test notes with commas stay in one column."""
        misc = registry.add("Misc")
        ledger.add("2024-03-15", TransactionKind.EXPENSE, Decimal("1"), misc, "a, b")
        path = tmp_path / "out.csv"
        export_csv(path, ledger, registry)
        assert path.read_text(encoding="utf-8").splitlines()[1].endswith(',"a, b"')

    def test_unwritable_path(self, tmp_path, registry, ledger):
        """Test a bad destination raises ExchangeError."""
        with pytest.raises(ExchangeError):
            export_csv(tmp_path / "missing" / "out.csv", ledger, registry)


class TestImport:
    """Tests for import_csv."""

    def test_round_trip(self, tmp_path, groceries_month, registry, ledger):
        """Test exported transactions import into an empty ledger unchanged."""
        path = tmp_path / "out.csv"
        export_csv(path, ledger, registry)

        fresh_registry = CategoryRegistry()
        fresh_ledger = TransactionLedger(fresh_registry)
        report = import_csv(path, fresh_ledger)

        assert report.imported_count == 3
        assert report.issues == []
        assert [c.name for c in report.created_categories] == ["Groceries", "Salary"]
        original = [
            (t.date, t.kind, t.amount, registry.name_of(t.category_id), t.note)
            for t in ledger.list()
        ]
        imported = [
            (t.date, t.kind, t.amount, fresh_registry.name_of(t.category_id), t.note)
            for t in fresh_ledger.list()
        ]
        assert imported == original

    def test_id_column_ignored(self, tmp_path, registry, ledger):
        """Test imported rows get new ids regardless of the file."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "40,2024-03-15,0,10.00,Misc,first\n"
        ))
        report = import_csv(path, ledger)
        assert report.transaction_ids == [1]

    def test_legacy_layout_without_id(self, tmp_path, registry, ledger):
        """Test files with date,type,amount,category,note columns import."""
        path = write_csv(tmp_path / "in.csv", (
            "date,type,amount,category,note\n"
            "2024-03-15,1,250.00,Salary,bonus\n"
        ))
        report = import_csv(path, ledger)
        transaction = ledger.find(report.transaction_ids[0])
        assert transaction.kind is TransactionKind.INCOME
        assert transaction.amount == Decimal("250.00")
        assert transaction.note == "bonus"

    def test_existing_category_matched_case_insensitively(self, tmp_path, registry, ledger):
        """Test names resolve to existing categories ignoring case."""
        groceries = registry.add("Groceries")
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "1,2024-03-15,0,5.00,GROCERIES,\n"
        ))
        report = import_csv(path, ledger)
        assert report.created_categories == []
        assert ledger.find(report.transaction_ids[0]).category_id == groceries

    def test_bad_rows_skipped_with_line_numbers(self, tmp_path, registry, ledger):
        """Test invalid rows are skipped and reported by line."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "1,2024-03-15,0,5.00,Misc,ok\n"
            "2,15/03/2024,0,5.00,Misc,bad date\n"
            "3,2024-03-15,0\n"
            "4,2024-03-15,0,5.00,,no category\n"
            "5,2024-03-15,0,-5.00,Misc,negative\n"
            "6,2024-03-16,0,6.00,Misc,ok again\n"
        ))
        report = import_csv(path, ledger)
        assert report.imported_count == 2
        assert report.skipped_lines == [3, 4, 5, 6]
        assert [t.note for t in ledger.list()] == ["ok", "ok again"]

    def test_row_with_several_errors_skipped_once(self, tmp_path, registry, ledger):
        """Test a row failing two checks counts as one skipped line."""
        path = write_csv(tmp_path / "in.csv", (
            "date,type,amount,category,note\n"
            "2024-01-01,0,-5,,x\n"
        ))
        report = import_csv(path, ledger)
        assert len([i for i in report.issues if i.severity == "error"]) == 2
        assert report.skipped_lines == [2]
        assert len(ledger) == 0

    def test_out_of_range_amount_imported_as_zero(self, tmp_path, registry, ledger):
        """Test an amount a record cannot hold is treated like an unparseable one."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "1,2024-03-15,0,1e400,Misc,huge\n"
        ))
        report = import_csv(path, ledger)
        assert report.warning_count == 1
        assert ledger.find(report.transaction_ids[0]).amount == Decimal("0")

    def test_unparseable_amount_imported_as_zero(self, tmp_path, registry, ledger):
        """Test a non-numeric amount becomes 0 with a warning."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "1,2024-03-15,0,abc,Misc,lenient\n"
        ))
        report = import_csv(path, ledger)
        assert report.imported_count == 1
        assert report.warning_count == 1
        assert report.skipped_lines == []
        assert ledger.find(report.transaction_ids[0]).amount == Decimal("0")

    def test_unquoted_commas_rejoined_into_note(self, tmp_path, registry, ledger):
        """Test extra columns after the category become part of the note."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "1,2024-03-15,0,5.00,Misc,milk, eggs, bread\n"
        ))
        report = import_csv(path, ledger)
        assert ledger.find(report.transaction_ids[0]).note == "milk, eggs, bread"

    def test_blank_lines_ignored(self, tmp_path, registry, ledger):
        """Test empty lines are neither imported nor reported."""
        path = write_csv(tmp_path / "in.csv", (
            "id,date,type,amount,category,note\n"
            "\n"
            "1,2024-03-15,0,5.00,Misc,\n"
        ))
        report = import_csv(path, ledger)
        assert report.imported_count == 1
        assert report.issues == []

    def test_header_only(self, tmp_path, registry, ledger):
        """Test a header with no rows imports nothing."""
        path = write_csv(tmp_path / "in.csv", "id,date,type,amount,category,note\n")
        assert import_csv(path, ledger).imported_count == 0

    def test_missing_file(self, tmp_path, ledger):
        """Test a missing file raises ExchangeError."""
        with pytest.raises(ExchangeError):
            import_csv(tmp_path / "nope.csv", ledger)
