"""Services package."""

from finance_tracker.services.exchange import (
    ExchangeError,
    export_csv,
    import_csv,
)
from finance_tracker.services.persistence import (
    BinaryFileStorage,
    CorruptRecordError,
    InMemoryLedgerStorage,
    LedgerSnapshot,
    LedgerStorageInterface,
    StorageError,
    XorObfuscation,
)

__all__ = [
    # Exchange services
    "ExchangeError",
    "export_csv",
    "import_csv",
    # Persistence services
    "BinaryFileStorage",
    "CorruptRecordError",
    "InMemoryLedgerStorage",
    "LedgerSnapshot",
    "LedgerStorageInterface",
    "StorageError",
    "XorObfuscation",
]
