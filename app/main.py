"""
Console Frontend for the Finance Tracker

A numbered menu over a FinanceTracker. Everything typed is handed to the
tracker as-is or as None for "keep"; the tracker and its stores decide
what is valid.

DESIGN PRINCIPLES:
1. Blank input keeps the current value
2. Recoverable errors become a message, then the menu comes back
3. Nothing is written to disk until "Save & Exit"
4. Logs go to stderr; the menu owns stdout

Run from the repository root:
    python -m app.main
"""

import sys
from datetime import date
from typing import Callable, Optional

from finance_tracker.audit import configure_logging, create_correlation_id
from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.errors import LedgerError
from finance_tracker.models import MonthReport, SearchCriteria, Transaction, TransactionKind
from finance_tracker.orchestrator import FinanceTracker, create_tracker
from finance_tracker.services import ExchangeError, StorageError
from finance_tracker.validation import is_valid_date, parse_amount


Reader = Callable[[str], str]
Writer = Callable[[str], None]

MENU = """
=== Menu ===
1) Add transaction
2) List transactions
3) Edit transaction
4) Delete transaction
5) Add category
6) List/Edit/Delete categories
7) Set/List budgets
8) Reports (monthly/category/budget)
9) Export CSV
10) Import CSV
11) Search transactions
12) Toggle file obfuscation (current: {obfuscation})
0) Save & Exit"""


class ConsoleMenu:
    """
    Interactive menu loop.

    reader and writer default to input() and print(); tests pass scripted
    replacements.
    """

    def __init__(
        self,
        tracker: FinanceTracker,
        reader: Reader = input,
        writer: Writer = print,
        default_export_path: str = "export.csv",
        today: Optional[Callable[[], date]] = None,
    ):
        self._tracker = tracker
        self._read = reader
        self._write = writer
        self._default_export_path = default_export_path
        self._today = today or date.today
        self._correlation_id = None
        self._actions = {
            "1": self.add_transaction,
            "2": self.list_transactions,
            "3": self.edit_transaction,
            "4": self.delete_transaction,
            "5": self.add_category,
            "6": self.manage_categories,
            "7": self.manage_budgets,
            "8": self.show_report,
            "9": self.export_csv,
            "10": self.import_csv,
            "11": self.search,
            "12": self.toggle_obfuscation,
        }

    def run(self) -> int:
        """Loop until the user saves and exits (or input ends). Returns an exit code."""
        while True:
            self._write(MENU.format(
                obfuscation="ON" if self._tracker.obfuscation_enabled else "OFF"
            ))
            try:
                choice = self._ask("Choice: ")
            except EOFError:
                choice = "0"

            if choice == "0":
                return self._save_and_exit()

            action = self._actions.get(choice)
            if action is None:
                self._write("Invalid.")
                continue

            self._correlation_id = create_correlation_id()
            try:
                action()
            except EOFError:
                return self._save_and_exit()
            except LedgerError as e:
                self._write(f"Error: {e}")
            except (StorageError, ExchangeError) as e:
                self._write(f"Error: {e}")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(self) -> None:
        default_date = self._today().isoformat()
        entered = self._ask(f"Date (YYYY-MM-DD) [default {default_date}]: ") or default_date
        if not is_valid_date(entered):
            self._write("Invalid date format.")
            return

        kind = TransactionKind.from_code(self._ask("Type: 0=Expense, 1=Income [0]: ") or 0)

        amount = parse_amount(self._ask("Amount: "))
        if amount is None or amount <= 0:
            self._write("Amount must be > 0.")
            return

        if not self._tracker.list_categories():
            self._write("No categories exist; create one now.")
            self.add_category()
            if not self._tracker.list_categories():
                self._write("No categories; aborted.")
                return

        self._print_categories()
        category_id = self._ask_int("Enter category id for this transaction: ")
        if category_id is None or not self._tracker.categories.exists(category_id):
            self._write("Invalid category.")
            return

        note = self._ask("Note (optional): ")
        transaction_id = self._tracker.add_transaction(
            entered, kind, amount, category_id, note,
            correlation_id=self._correlation_id,
        )
        self._write(f"Transaction added (id={transaction_id}).")

    def list_transactions(self) -> None:
        start = end = None
        if self._ask("List all or range? (a/r) ").lower().startswith("r"):
            start = self._ask("Start date: ") or None
            end = self._ask("End date: ") or None

        transactions = self._tracker.list_transactions(
            start, end, correlation_id=self._correlation_id
        )
        if not transactions:
            self._write("Transactions: (none)")
            return
        self._write("Transactions:")
        for transaction in transactions:
            self._write(self._format_transaction(transaction))

    def edit_transaction(self) -> None:
        transaction_id = self._ask_int("Enter transaction id to edit: ")
        current = self._tracker.ledger.find(transaction_id) if transaction_id else None
        if current is None:
            self._write("Not found.")
            return

        new_date = self._ask(f"Date [{current.date}]: ") or None
        kind_text = self._ask(f"Type 0=Expense,1=Income [{int(current.kind)}]: ")
        amount = parse_amount(self._ask(f"Amount [{current.amount:.2f}]: "))
        category_id = self._ask_int(f"Category id [{current.category_id}]: ")
        note = self._ask(f"Note [{current.note}]: ") or None

        edit = self._tracker.edit_transaction(
            transaction_id,
            date=new_date,
            kind=int(kind_text) if kind_text in ("0", "1") else None,
            amount=amount,
            category_id=category_id,
            note=note,
            correlation_id=self._correlation_id,
        )
        for warning in edit.warnings:
            self._write(warning)
        self._write("Updated.")

    def delete_transaction(self) -> None:
        transaction_id = self._ask_int("Enter transaction id to delete: ")
        if transaction_id is None or self._tracker.ledger.find(transaction_id) is None:
            self._write("Not found.")
            return
        self._tracker.remove_transaction(transaction_id, correlation_id=self._correlation_id)
        self._write("Deleted.")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self) -> None:
        name = self._ask("Category name: ")
        if not name:
            self._write("Empty name aborted.")
            return
        category_id = self._tracker.add_category(name, correlation_id=self._correlation_id)
        self._write(
            f"Added category '{self._tracker.categories.name_of(category_id)}' (id={category_id})."
        )

    def manage_categories(self) -> None:
        self._print_categories()
        action = self._ask("e=edit, d=delete, anything else to return: ").lower()

        if action == "e":
            category_id = self._ask_int("Enter category id to edit: ")
            category = self._tracker.categories.get(category_id) if category_id else None
            if category is None:
                self._write("Not found.")
                return
            new_name = self._ask(f"New name (enter for keep '{category.name}'): ")
            self._tracker.rename_category(
                category_id, new_name, correlation_id=self._correlation_id
            )
            self._write("Updated.")
        elif action == "d":
            category_id = self._ask_int("Enter category id to remove: ")
            if category_id is None or not self._tracker.categories.exists(category_id):
                self._write("Not found.")
                return
            self._tracker.remove_category(category_id, correlation_id=self._correlation_id)
            self._write("Deleted.")

    # -------------------------------------------------------------------------
    # Budgets and reports
    # -------------------------------------------------------------------------

    def manage_budgets(self) -> None:
        choice = self._ask("1=set budget 2=list budgets : ")
        if choice == "1":
            self._set_budget()
        elif choice == "2":
            self._list_budgets()

    def _set_budget(self) -> None:
        category_id = self._ask_int("Enter category id to set budget: ")
        if category_id is None or not self._tracker.categories.exists(category_id):
            self._write("Invalid category.")
            return
        year = self._ask_int("Year (e.g., 2025): ")
        month = self._ask_int("Month (1-12): ")
        if year is None or month is None or not 1 <= month <= 12:
            self._write("Invalid month.")
            return
        amount = parse_amount(self._ask(f"Budget amount for {year:04d}-{month:02d}: "))
        if amount is None or amount < 0:
            self._write("Invalid amount.")
            return

        existed = self._tracker.budgets.get(category_id, year, month) is not None
        self._tracker.set_budget(
            category_id, year, month, amount, correlation_id=self._correlation_id
        )
        self._write("Updated budget." if existed else "Budget set.")

    def _list_budgets(self) -> None:
        entries = self._tracker.list_budgets()
        if not entries:
            self._write("No budgets.")
            return
        for entry in entries:
            name = self._tracker.categories.name_of(entry.category_id)
            self._write(f"  {entry.year:04d}-{entry.month:02d}  {name}  {entry.amount:.2f}")

    def show_report(self) -> None:
        year = self._ask_int("Year: ")
        month = self._ask_int("Month: ")
        if year is None or month is None:
            self._write("Invalid year or month.")
            return
        report = self._tracker.month_report(year, month, correlation_id=self._correlation_id)
        for line in format_month_report(report):
            self._write(line)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def export_csv(self) -> None:
        path = self._ask(
            f"Export path [default {self._default_export_path}]: "
        ) or self._default_export_path
        count = self._tracker.export_csv(path, correlation_id=self._correlation_id)
        self._write(f"Exported {count} transactions to {path}")

    def import_csv(self) -> None:
        path = self._ask("CSV path to import: ")
        if not path:
            self._write("Aborted.")
            return

        report = self._tracker.import_csv(path, correlation_id=self._correlation_id)
        for issue in report.issues:
            self._write(issue.message)
        for category in report.created_categories:
            self._write(f"Created category '{category.name}' id={category.id}")
        self._write(
            f"Import complete: {report.imported_count} imported, "
            f"{len(report.skipped_lines)} skipped."
        )

    def toggle_obfuscation(self) -> None:
        if self._tracker.obfuscation_enabled:
            self._tracker.disable_obfuscation()
            self._write("Obfuscation disabled.")
            return

        if not self._ask("Enable simple XOR obfuscation? (y/n): ").lower().startswith("y"):
            return
        key = self._read("Enter single-character key (not secure): ")
        if not key:
            self._write("No key; aborted.")
            return
        self._tracker.enable_obfuscation(key[0])
        self._write("Obfuscation enabled.")

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self) -> None:
        self._write("Search: leave fields blank to ignore.")
        criteria = SearchCriteria(
            start_date=self._ask("Start date (YYYY-MM-DD): "),
            end_date=self._ask("End date (YYYY-MM-DD): "),
            category_text=self._ask("Category name (partial): "),
            min_amount=parse_amount(self._ask("Min amount (0 to ignore): ")),
            max_amount=parse_amount(self._ask("Max amount (0 to ignore): ")),
            note_text=self._ask("Text in note (partial): "),
        )
        results = self._tracker.search(criteria, correlation_id=self._correlation_id)
        self._write("Search results:")
        if not results:
            self._write("  (none)")
        for transaction in results:
            self._write(self._format_transaction(transaction))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _save_and_exit(self) -> int:
        try:
            self._tracker.save()
        except StorageError as e:
            self._write(f"Warning: unable to save: {e}")
            return 1
        self._write("Goodbye.")
        return 0

    def _ask(self, prompt: str) -> str:
        return self._read(prompt).strip()

    def _ask_int(self, prompt: str) -> Optional[int]:
        text = self._ask(prompt)
        try:
            return int(text)
        except ValueError:
            return None

    def _print_categories(self) -> None:
        categories = self._tracker.list_categories()
        if not categories:
            self._write("Categories: (none)")
            return
        self._write("Categories:")
        for category in categories:
            self._write(f"  id={category.id}  {category.name}")

    def _format_transaction(self, transaction: Transaction) -> str:
        name = self._tracker.categories.name_of(transaction.category_id)
        return (
            f"  id={transaction.id}  {transaction.date}  {transaction.kind.label}  "
            f"{transaction.amount:.2f}  [{name}]  {transaction.note}"
        )


def format_month_report(report: MonthReport) -> list[str]:
    """Render a combined report as console lines."""
    summary = report.summary
    period = f"{summary.year:04d}-{summary.month:02d}"
    lines = [
        f"Monthly Summary for {period}:",
        f"  Total Income:  {summary.total_income:.2f}",
        f"  Total Expense: {summary.total_expense:.2f}",
        f"  Net Savings:   {summary.net:.2f}",
        f"Category Summary {period}:",
    ]
    if not report.category_totals:
        lines.append("  (no categories)")
    for category, total in report.category_totals.items():
        lines.append(f"  {category.name:<20} : {total:.2f}")

    lines.append(f"Budget Report {period}:")
    if not report.budget.has_budgets:
        lines.append("  No budgets set for this month.")
    for row in report.budget.rows:
        flag = "  OVER" if row.over_budget else ""
        lines.append(
            f"  {row.category_name:<16} Budget: {row.budget_amount:.2f}  "
            f"Used: {row.used:.2f}  Remaining: {row.remaining:.2f}{flag}"
        )
    return lines


def main() -> int:
    """Main application entry point."""
    status = validate_all_settings()
    for name in ("storage", "app"):
        if not status[name]:
            print(f"Configuration error ({name}): {status[f'{name}_error']}", file=sys.stderr)
            return 1

    settings = get_settings()
    configure_logging(settings.app.effective_log_level, settings.app.log_json)

    print("Personal Finance Manager")
    print(f"Note: data files are stored in {settings.storage.data_dir.resolve()}.")
    print("Optional file obfuscation (XOR) is available from the menu.")

    tracker = create_tracker(settings)
    try:
        tracker.load()
    except StorageError as e:
        # Refuse to continue; saving now would overwrite the unreadable files
        print(f"Fatal: {e}", file=sys.stderr)
        return 1

    menu = ConsoleMenu(tracker, default_export_path=settings.app.default_export_path)
    try:
        return menu.run()
    except MemoryError:
        tracker.audit_logger.log_error(
            error_type="MemoryError",
            error_message="Out of memory",
        )
        print("Fatal: out of memory", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
