"""
Budget Table

Per (category, year, month) spending limits. At most one entry exists per
key; setting an existing key overwrites its amount.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.errors import ReferentialIntegrityError, ValidationError
from finance_tracker.models.ledger import BudgetEntry
from finance_tracker.stores.categories import CategoryRegistry
from finance_tracker.validation.fields import to_decimal, validate_month, validate_year


class BudgetTable:
    """In-memory budget entries keyed by (category_id, year, month)."""

    def __init__(self, categories: CategoryRegistry):
        self._categories = categories
        self._entries: dict[tuple[int, int, int], BudgetEntry] = {}

    def set(self, category_id: int, year: int, month: int, amount: Decimal) -> BudgetEntry:
        """
        Create or overwrite the budget for one category and month.

        Raises:
            ValidationError: if year is outside 1900-9999, month is outside
                1-12, or amount is negative
            ReferentialIntegrityError: if the category does not exist
        """
        validate_year(year)
        validate_month(month)
        amount = to_decimal(amount)
        if amount < 0:
            raise ValidationError(f"Budget amount must not be negative (got {amount})")
        if not self._categories.exists(category_id):
            raise ReferentialIntegrityError(f"Category {category_id} does not exist")

        entry = BudgetEntry(category_id=category_id, year=year, month=month, amount=amount)
        # Overwriting keeps the entry's original position
        self._entries[entry.key] = entry
        return entry

    def get(self, category_id: int, year: int, month: int) -> Optional[Decimal]:
        entry = self._entries.get((category_id, year, month))
        return entry.amount if entry else None

    def for_month(self, year: int, month: int) -> list[BudgetEntry]:
        return [
            entry for entry in self._entries.values()
            if entry.year == year and entry.month == month
        ]

    def list(self) -> list[BudgetEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot(self) -> list[BudgetEntry]:
        return self.list()

    def restore(self, entries: Iterable[BudgetEntry]) -> None:
        """Replace contents with persisted entries; a later duplicate key wins."""
        self._entries = {}
        for entry in entries:
            self._entries[entry.key] = entry
