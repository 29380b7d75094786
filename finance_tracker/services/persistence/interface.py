"""
Abstract Persistence Interface

DESIGN DECISION: We define an abstract interface for loading and saving
the ledger. This allows us to:
1. Keep the stores free of any file handling
2. Use in-memory storage for testing
3. Swap the fixed-record binary files for another format later

The stores only promise a flat, ordered sequence of records per store.
What happens to the bytes after that (packing, obfuscation) is the
storage implementation's business.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from finance_tracker.models.ledger import BudgetEntry, Category, Transaction


class LedgerSnapshot(BaseModel):
    """Ordered records of all three stores, as handed to or from storage."""

    categories: list[Category] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[BudgetEntry] = Field(default_factory=list)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """
        Load every store.

        Returns:
            The persisted records; empty lists where nothing is stored

        Raises:
            StorageError: If the data exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Persist every store, overwriting what was there.

        Raises:
            StorageError: If save fails
        """
        pass


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Keeps the last saved snapshot in memory. Used by tests."""

    def __init__(self, snapshot: LedgerSnapshot = None):
        self._snapshot = snapshot or LedgerSnapshot()
        self.save_count = 0

    def load(self) -> LedgerSnapshot:
        return self._snapshot.model_copy(deep=True)

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1


class StorageError(Exception):
    """Base exception for persistence operations."""
    pass


class CorruptRecordError(StorageError):
    """A persisted record could not be decoded into a valid entity."""
    pass
