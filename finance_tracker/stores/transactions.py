"""
Transaction Ledger

Owns transaction records. Category existence is always checked by asking
the Category Registry, never by keeping a copy of category state.

Enumeration is insertion order, not chronological. Reports aggregate
independently of ledger order, so the ledger never sorts.

EDIT CONVENTIONS (shared with the console, which passes None for blank):
- None/blank for a field keeps the current value
- a date that fails to parse is rejected with a warning, old value kept
- a category id that does not exist is ignored silently, old value kept
- an amount <= 0 is treated like blank
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Iterator, Optional

from finance_tracker.errors import NotFoundError, ValidationError
from finance_tracker.models.ledger import Transaction, TransactionKind
from finance_tracker.models.reports import IngestResult, TransactionEdit
from finance_tracker.stores.categories import CategoryRegistry
from finance_tracker.validation.fields import (
    MAX_NOTE_BYTES,
    clean_text,
    is_blank,
    parse_date,
    to_decimal,
)


class TransactionLedger:
    """In-memory ledger of transactions keyed by id."""

    def __init__(self, categories: CategoryRegistry):
        self._categories = categories
        self._transactions: dict[int, Transaction] = {}
        self._next_id = 1
        categories.register_reference_check(self.references_category)

    def add(
        self,
        date: str,
        kind: TransactionKind,
        amount: Decimal,
        category_id: int,
        note: Optional[str] = "",
    ) -> int:
        """
        Record a new transaction and return its id.

        Raises:
            ValidationError: if amount <= 0, the date fails to parse,
                or the category does not exist
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError(f"Amount must be greater than zero (got {amount})")
        parse_date(date)
        if not self._categories.exists(category_id):
            raise ValidationError(f"Category {category_id} does not exist")

        return self._insert(date, TransactionKind(kind), amount, category_id, note).id

    def edit(
        self,
        transaction_id: int,
        date: Optional[str] = None,
        kind: Optional[TransactionKind] = None,
        amount: Optional[Decimal] = None,
        category_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> TransactionEdit:
        """
        Update a transaction field by field.

        Raises:
            NotFoundError: if the id is unknown
        """
        current = self._require(transaction_id)
        updates: dict = {}
        warnings: list[str] = []

        if not is_blank(date):
            try:
                updates["date"] = parse_date(date.strip())
            except ValidationError as e:
                warnings.append(f"{e}; date kept as {current.date}")

        if kind is not None and kind in (TransactionKind.EXPENSE, TransactionKind.INCOME):
            updates["kind"] = TransactionKind(kind)

        if amount is not None:
            amount = to_decimal(amount)
            if amount > 0:
                updates["amount"] = amount

        if category_id is not None and self._categories.exists(category_id):
            updates["category_id"] = category_id

        if not is_blank(note):
            updates["note"] = clean_text(note, MAX_NOTE_BYTES)

        changed = [
            name for name, value in updates.items()
            if getattr(current, name) != value
        ]
        updated = current.model_copy(update=updates)
        self._transactions[transaction_id] = updated

        return TransactionEdit(
            transaction=updated,
            changed_fields=changed,
            warnings=warnings,
        )

    def remove(self, transaction_id: int) -> None:
        """
        Delete a transaction. Nothing else is affected.

        Raises:
            NotFoundError: if the id is unknown
        """
        self._require(transaction_id)
        del self._transactions[transaction_id]

    def find(self, transaction_id: int) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def list(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Iterator[Transaction]:
        """
        Lazily yield transactions in insertion order within [start, end].

        Both bounds are optional and inclusive.

        Raises:
            ValidationError: if a supplied bound is not a valid date
        """
        if start is not None:
            parse_date(start)
        if end is not None:
            parse_date(end)
        return self._iter_range(start, end)

    def references_category(self, category_id: int) -> bool:
        return any(t.category_id == category_id for t in self._transactions.values())

    def ingest(
        self,
        date: str,
        kind: TransactionKind,
        amount: Decimal,
        category_name: str,
        note: Optional[str] = "",
    ) -> IngestResult:
        """
        Insert a transaction by category name, creating the category if absent.

        This is the import path. Names match case-insensitively. Unlike
        add(), a zero amount is accepted: import reads an unparseable
        amount as 0 rather than failing the row.

        Raises:
            ValidationError: if the date fails to parse, the amount is
                negative, or the category name is blank
        """
        parse_date(date)
        amount = to_decimal(amount)
        if amount < 0:
            raise ValidationError(f"Amount must not be negative (got {amount})")
        if is_blank(category_name):
            raise ValidationError("Category name must not be empty")

        created = None
        category = self._categories.find_by_name(category_name)
        if category is None:
            created = self._categories.get(self._categories.add(category_name))
            category = created

        transaction = self._insert(date, TransactionKind(kind), amount, category.id, note)
        return IngestResult(transaction=transaction, created_category=created)

    def __len__(self) -> int:
        return len(self._transactions)

    # -------------------------------------------------------------------------
    # Persistence contract
    # -------------------------------------------------------------------------

    def snapshot(self) -> list[Transaction]:
        return list(self._transactions.values())

    def restore(self, transactions: Iterable[Transaction]) -> None:
        """
        Replace the ledger contents with persisted records.

        The next id is recomputed as 1 + max(existing ids).
        """
        self._transactions = {t.id: t for t in transactions}
        self._next_id = max(self._transactions, default=0) + 1

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _insert(
        self,
        date: str,
        kind: TransactionKind,
        amount: Decimal,
        category_id: int,
        note: Optional[str],
    ) -> Transaction:
        transaction = Transaction(
            id=self._next_id,
            date=date,
            amount=amount,
            category_id=category_id,
            kind=kind,
            note=note or "",
        )
        self._transactions[transaction.id] = transaction
        self._next_id += 1
        return transaction

    def _iter_range(self, start: Optional[str], end: Optional[str]) -> Iterator[Transaction]:
        # Snapshot the values so callers may mutate the ledger while iterating
        for transaction in list(self._transactions.values()):
            if start is not None and transaction.date < start:
                continue
            if end is not None and transaction.date > end:
                continue
            yield transaction

    def _require(self, transaction_id: int) -> Transaction:
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction
