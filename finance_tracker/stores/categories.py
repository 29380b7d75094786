"""
Category Registry

Owns category identity and naming. This is the leaf store: transactions
and budget entries point at categories, never the other way round.

Removal asks every registered reference check (the transaction ledger
registers one) whether the id is still in use, so the registry can enforce
referential integrity without holding a copy of transaction state.

Enumeration order is insertion order and survives removals. The id, not
the position, is the stable handle.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from finance_tracker.errors import NotFoundError, ReferentialIntegrityError, ValidationError
from finance_tracker.models.ledger import UNKNOWN_CATEGORY_NAME, Category
from finance_tracker.validation.fields import MAX_CATEGORY_NAME_BYTES, clean_text, is_blank


ReferenceCheck = Callable[[int], bool]


class CategoryRegistry:
    """In-memory registry of categories keyed by id."""

    def __init__(self):
        self._categories: dict[int, Category] = {}
        self._next_id = 1
        self._reference_checks: list[ReferenceCheck] = []

    def register_reference_check(self, check: ReferenceCheck) -> None:
        """Register a callable that returns True while a category id is referenced."""
        self._reference_checks.append(check)

    def add(self, name: str) -> int:
        """
        Add a category and return its new id.

        Raises:
            ValidationError: if the name is empty after trimming
        """
        if is_blank(name):
            raise ValidationError("Category name must not be empty")

        category = Category(id=self._next_id, name=name)
        self._categories[category.id] = category
        self._next_id += 1
        return category.id

    def rename(self, category_id: int, new_name: Optional[str]) -> Category:
        """
        Rename a category. A blank name keeps the current one.

        Raises:
            NotFoundError: if the id is unknown
        """
        current = self._require(category_id)
        if is_blank(new_name):
            return current

        renamed = current.model_copy(
            update={"name": clean_text(new_name, MAX_CATEGORY_NAME_BYTES)}
        )
        self._categories[category_id] = renamed
        return renamed

    def remove(self, category_id: int) -> None:
        """
        Remove a category.

        Budget entries pointing at it are left behind as orphans.

        Raises:
            NotFoundError: if the id is unknown
            ReferentialIntegrityError: if any transaction references it
        """
        self._require(category_id)
        if any(check(category_id) for check in self._reference_checks):
            raise ReferentialIntegrityError(
                f"Category {category_id} is used by transactions and cannot be deleted"
            )
        del self._categories[category_id]

    def exists(self, category_id: int) -> bool:
        return category_id in self._categories

    def get(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    def name_of(self, category_id: int) -> str:
        """Display name for an id, or UNKNOWN for an orphaned reference."""
        category = self._categories.get(category_id)
        return category.name if category else UNKNOWN_CATEGORY_NAME

    def find_by_name(self, name: str) -> Optional[Category]:
        """First category whose name matches case-insensitively, if any."""
        wanted = name.strip().casefold()
        for category in self._categories.values():
            if category.name.casefold() == wanted:
                return category
        return None

    def list(self) -> list[Category]:
        return list(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    # -------------------------------------------------------------------------
    # Persistence contract
    # -------------------------------------------------------------------------

    def snapshot(self) -> list[Category]:
        return self.list()

    def restore(self, categories: Iterable[Category]) -> None:
        """
        Replace the registry contents with persisted records.

        The next id is recomputed as 1 + max(existing ids); a persisted
        counter is never trusted.
        """
        self._categories = {category.id: category for category in categories}
        self._next_id = max(self._categories, default=0) + 1

    def _require(self, category_id: int) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        return category
