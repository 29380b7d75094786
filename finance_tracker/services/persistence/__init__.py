"""
Persistence Services Package

Provides the abstract storage interface and the fixed-record binary file
implementation, with optional XOR obfuscation.
"""

from finance_tracker.services.persistence.interface import (
    CorruptRecordError,
    InMemoryLedgerStorage,
    LedgerSnapshot,
    LedgerStorageInterface,
    StorageError,
)
from finance_tracker.services.persistence.binary_file import (
    BinaryFileStorage,
    XorObfuscation,
)

__all__ = [
    # Interfaces
    "LedgerSnapshot",
    "LedgerStorageInterface",
    "InMemoryLedgerStorage",
    # Exceptions
    "CorruptRecordError",
    "StorageError",
    # Binary file implementation
    "BinaryFileStorage",
    "XorObfuscation",
]
