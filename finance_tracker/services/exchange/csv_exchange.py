"""
CSV Import/Export

Translates between CSV files and ledger mutations.

EXPORT writes a literal header line and then one line per transaction in
ledger order:

    id,date,type,amount,category,note
    1,2024-03-15,0,45.50,Groceries,weekly shop

IMPORT reads the same shape. The id column is ignored (new ids are
assigned). Files without an id column (date,type,amount,category,note)
are accepted too. Categories are resolved by name, case-insensitively,
and created on first miss.

Rows with a bad date, missing columns, no category or a negative amount
are skipped and reported by line number. An unparseable amount is
imported as 0 and reported as a warning.
"""

import csv
from pathlib import Path
from typing import Optional, Union

from finance_tracker.audit.logger import get_logger
from finance_tracker.errors import LedgerError
from finance_tracker.models.exchange import (
    CSV_HEADER,
    CsvTransactionRow,
    ImportReport,
    ValidationIssue,
)
from finance_tracker.models.ledger import TransactionKind
from finance_tracker.stores.categories import CategoryRegistry
from finance_tracker.stores.transactions import TransactionLedger
from finance_tracker.validation.validator import CsvRowValidator


logger = get_logger(__name__)

# date, type, amount, category; the note is optional
REQUIRED_COLUMNS = 4


class ExchangeError(Exception):
    """A CSV file could not be opened, read or written."""
    pass


def export_csv(
    path: Union[str, Path],
    ledger: TransactionLedger,
    categories: CategoryRegistry,
) -> int:
    """
    Write every transaction to a CSV file.

    Returns:
        Number of transactions written

    Raises:
        ExchangeError: if the file cannot be written
    """
    count = 0
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            for transaction in ledger.list():
                writer.writerow([
                    transaction.id,
                    transaction.date,
                    int(transaction.kind),
                    f"{transaction.amount:.2f}",
                    categories.name_of(transaction.category_id),
                    transaction.note,
                ])
                count += 1
    except OSError as e:
        raise ExchangeError(f"Unable to open {path} for export: {e}")

    logger.info("csv_exported", path=str(path), transactions=count)
    return count


def import_csv(
    path: Union[str, Path],
    ledger: TransactionLedger,
    validator: Optional[CsvRowValidator] = None,
) -> ImportReport:
    """
    Import transactions from a CSV file into the ledger.

    The first line is always treated as a header.

    Raises:
        ExchangeError: if the file cannot be opened or decoded
    """
    validator = validator or CsvRowValidator()
    report = ImportReport(source=str(path))

    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header is None:
                return report
            offset = 1 if header and header[0].strip().lower() == "id" else 0

            for fields in reader:
                if not any(field.strip() for field in fields):
                    continue
                _import_row(reader.line_num, fields, offset, ledger, validator, report)
    except (OSError, UnicodeDecodeError) as e:
        raise ExchangeError(f"Unable to read {path}: {e}")

    logger.info(
        "csv_imported",
        path=str(path),
        imported=report.imported_count,
        skipped=len(report.skipped_lines),
        created_categories=[c.name for c in report.created_categories],
    )
    return report


def _import_row(
    line: int,
    fields: list[str],
    offset: int,
    ledger: TransactionLedger,
    validator: CsvRowValidator,
    report: ImportReport,
) -> None:
    columns = fields[offset:]
    if len(columns) < REQUIRED_COLUMNS:
        report.issues.append(
            validator.too_few_columns(line, len(columns), REQUIRED_COLUMNS)
        )
        return

    row = CsvTransactionRow(
        line=line,
        date=columns[0].strip(),
        kind=TransactionKind.from_code(columns[1]),
        amount_text=columns[2],
        category_name=columns[3].strip(),
        # Unquoted notes may contain commas; keep everything after category
        note=",".join(columns[4:]).rstrip("\r\n"),
    )

    result = validator.validate(row)
    report.issues.extend(result.issues)
    if result.has_errors:
        return

    try:
        ingested = ledger.ingest(
            date=row.date,
            kind=row.kind,
            amount=result.amount,
            category_name=row.category_name,
            note=row.note,
        )
    except LedgerError as e:
        report.issues.append(ValidationIssue(
            line=line,
            field="row",
            issue_type="rejected",
            message=f"Line {line} rejected: {e}",
            severity="error",
        ))
        return

    report.imported_count += 1
    report.transaction_ids.append(ingested.transaction.id)
    if ingested.created_category is not None:
        report.created_categories.append(ingested.created_category)
