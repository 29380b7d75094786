"""
Fixed-Record Binary File Storage

DESIGN DECISION: Each store is written to its own file as fixed-size
records packed back to back with no delimiters or header:

    categories.dat     <i64s           id, name
    transactions.dat   <i11sdii256s    id, date, amount, category_id, kind, note
    budgets.dat        <iiid           category_id, year, month, amount

Strings are UTF-8, NUL padded. Amounts are stored as IEEE doubles and read
back through repr(), so two-decimal amounts round-trip exactly.

OBFUSCATION: an optional single-byte XOR mask is applied to every byte
after packing and before unpacking. It is NOT encryption. The key is chosen
by the user, and the stores never see it.

TRADEOFFS:
- Whole-file overwrite on every save; no journaling
- Record layout is little-endian and unpadded, so files are portable
  across machines but not byte-compatible with older C-struct dumps
"""

import struct
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError as ModelValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_tracker.audit.logger import get_logger
from finance_tracker.config import StorageSettings
from finance_tracker.errors import LedgerError
from finance_tracker.models.ledger import BudgetEntry, Category, Transaction, TransactionKind
from finance_tracker.services.persistence.interface import (
    CorruptRecordError,
    LedgerSnapshot,
    LedgerStorageInterface,
    StorageError,
)
from finance_tracker.validation.fields import fits_record


logger = get_logger(__name__)

CATEGORY_RECORD = struct.Struct("<i64s")
TRANSACTION_RECORD = struct.Struct("<i11sdii256s")
BUDGET_RECORD = struct.Struct("<iiid")

Record = TypeVar("Record")


class XorObfuscation:
    """
    Reversible single-byte XOR transform.

    A key of 0 (or a disabled transform) leaves bytes untouched.
    """

    def __init__(self, key: Optional[int] = None):
        self._key = 0
        if key:
            self.enable(key)

    @property
    def enabled(self) -> bool:
        return self._key != 0

    def enable(self, key: int) -> None:
        if not 0 < key < 256:
            raise ValueError("Obfuscation key must be a single byte (1-255)")
        self._key = key

    def disable(self) -> None:
        self._key = 0

    def apply(self, data: bytes) -> bytes:
        if not self._key:
            return data
        key = self._key
        return bytes(b ^ key for b in data)


# =============================================================================
# RECORD CODECS
# =============================================================================

def _encode_text(value: str, size: int) -> bytes:
    # Leave room for the terminating NUL of the fixed-width field
    return value.encode("utf-8")[:size - 1]


def _decode_text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _encode_amount(value: Decimal) -> float:
    if not fits_record(value):
        raise StorageError(f"Amount {value} cannot be stored as a double")
    return float(value)


def _decode_amount(raw: float) -> Decimal:
    return Decimal(repr(raw))


def _pack(layout: struct.Struct, kind: str, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as e:
        raise StorageError(f"Cannot store {kind} record {values[0]}: {e}")


def pack_category(category: Category) -> bytes:
    return _pack(CATEGORY_RECORD, "category", category.id, _encode_text(category.name, 64))


def unpack_category(chunk: bytes) -> Category:
    category_id, name = CATEGORY_RECORD.unpack(chunk)
    return Category(id=category_id, name=_decode_text(name))


def pack_transaction(transaction: Transaction) -> bytes:
    return _pack(
        TRANSACTION_RECORD,
        "transaction",
        transaction.id,
        transaction.date.encode("ascii"),
        _encode_amount(transaction.amount),
        transaction.category_id,
        int(transaction.kind),
        _encode_text(transaction.note, 256),
    )


def unpack_transaction(chunk: bytes) -> Transaction:
    transaction_id, date, amount, category_id, kind, note = TRANSACTION_RECORD.unpack(chunk)
    return Transaction(
        id=transaction_id,
        date=_decode_text(date),
        amount=_decode_amount(amount),
        category_id=category_id,
        kind=TransactionKind.from_code(kind),
        note=_decode_text(note),
    )


def pack_budget(entry: BudgetEntry) -> bytes:
    return _pack(
        BUDGET_RECORD,
        "budget",
        entry.category_id,
        entry.year,
        entry.month,
        _encode_amount(entry.amount),
    )


def unpack_budget(chunk: bytes) -> BudgetEntry:
    category_id, year, month, amount = BUDGET_RECORD.unpack(chunk)
    return BudgetEntry(
        category_id=category_id,
        year=year,
        month=month,
        amount=_decode_amount(amount),
    )


# =============================================================================
# FILE STORAGE
# =============================================================================

class BinaryFileStorage(LedgerStorageInterface):
    """
    Binary file implementation of ledger storage.

    One file per store, written whole on every save.
    """

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        obfuscation: Optional[XorObfuscation] = None,
    ):
        self._settings = settings or StorageSettings()
        if obfuscation is None:
            obfuscation = XorObfuscation(self._settings.obfuscation_key_byte)
        self.obfuscation = obfuscation

    def load(self) -> LedgerSnapshot:
        """Load all three stores; missing files mean empty stores."""
        return LedgerSnapshot(
            categories=self._load_records(
                self._settings.categories_path, CATEGORY_RECORD, unpack_category
            ),
            transactions=self._load_records(
                self._settings.transactions_path, TRANSACTION_RECORD, unpack_transaction
            ),
            budgets=self._load_records(
                self._settings.budgets_path, BUDGET_RECORD, unpack_budget
            ),
        )

    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Overwrite all three files, empty stores included.

        Every record is packed before any file is touched, so a record that
        cannot be stored leaves the previous files intact.
        """
        payloads = [
            (
                self._settings.categories_path,
                b"".join(pack_category(c) for c in snapshot.categories),
            ),
            (
                self._settings.transactions_path,
                b"".join(pack_transaction(t) for t in snapshot.transactions),
            ),
            (
                self._settings.budgets_path,
                b"".join(pack_budget(b) for b in snapshot.budgets),
            ),
        ]
        try:
            self._settings.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self._settings.data_dir}: {e}")
        for path, data in payloads:
            self._write_file(path, data)
        logger.info(
            "ledger_saved",
            data_dir=str(self._settings.data_dir),
            categories=len(snapshot.categories),
            transactions=len(snapshot.transactions),
            budgets=len(snapshot.budgets),
            obfuscated=self.obfuscation.enabled,
        )

    def _load_records(
        self,
        path: Path,
        layout: struct.Struct,
        unpack: Callable[[bytes], Record],
    ) -> list[Record]:
        data = self._read_file(path)
        if data is None:
            return []

        data = self.obfuscation.apply(data)
        count, remainder = divmod(len(data), layout.size)
        if remainder:
            logger.warning(
                "trailing_partial_record",
                path=str(path),
                record_size=layout.size,
                ignored_bytes=remainder,
            )

        records = []
        for index in range(count):
            chunk = data[index * layout.size:(index + 1) * layout.size]
            try:
                records.append(unpack(chunk))
            except (ModelValidationError, LedgerError, UnicodeDecodeError) as e:
                raise CorruptRecordError(
                    f"Record {index} of {path.name} is not readable "
                    f"(wrong obfuscation key?): {e}"
                )
        return records

    @retry(
        retry=retry_if_exception_type(StorageError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _read_file(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    @retry(
        retry=retry_if_exception_type(StorageError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_file(self, path: Path, data: bytes) -> None:
        try:
            path.write_bytes(self.obfuscation.apply(data))
        except OSError as e:
            raise StorageError(f"Failed to save {path}: {e}")
