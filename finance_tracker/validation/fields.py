"""
Field-level input contracts.

These helpers are the single source of truth for what a valid date,
amount, month or name looks like. Models, stores and gateways all call
them rather than re-implementing the checks.

DESIGN DECISION: Dates stay as zero-padded "YYYY-MM-DD" strings.
Day 1-31 is accepted for every month (no February or 30-day check), so a
value like "2024-02-31" is valid here even though datetime.date would
refuse it. Tightening this would reject data that was stored before.
Zero-padded strings sort exactly like calendar order, which is what the
report windows rely on.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from finance_tracker.errors import ValidationError


DATE_FORMAT_HINT = "YYYY-MM-DD"
MIN_YEAR = 1900
MAX_YEAR = 9999

MAX_CATEGORY_NAME_BYTES = 63
MAX_NOTE_BYTES = 255

_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)


def parse_date(text: str) -> str:
    """
    Validate a ledger date and return it unchanged.

    Raises:
        ValidationError: if the text is not a zero-padded date with
            year 1900-9999, month 1-12 and day 1-31.
    """
    if text is None:
        raise ValidationError(f"Date is required ({DATE_FORMAT_HINT})")

    match = _DATE_RE.fullmatch(text)
    if not match:
        raise ValidationError(f"Invalid date '{text}', expected {DATE_FORMAT_HINT}")

    year, month, day = (int(part) for part in match.groups())
    validate_year(year)
    validate_month(month)
    if not 1 <= day <= 31:
        raise ValidationError(f"Day {day} outside 1-31")

    return text


def is_valid_date(text: Optional[str]) -> bool:
    """Check a date against the parse contract without raising."""
    try:
        parse_date(text)
    except ValidationError:
        return False
    return True


def validate_month(month: int) -> int:
    """Reject months outside 1-12."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Month {month} outside 1-12")
    return month


def validate_year(year: int) -> int:
    """Reject years outside the range a ledger date can carry."""
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year {year} outside {MIN_YEAR}-{MAX_YEAR}")
    return year


def fits_record(value: Decimal) -> bool:
    """
    Check an amount survives the double-precision field of a record.

    Values past the double range become inf, and tiny non-zero values
    become 0.0; neither reads back as the amount that was written.
    """
    as_float = float(value)
    return math.isfinite(as_float) and (as_float != 0 or value == 0)


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Leniently parse an amount typed by a user or read from CSV.

    Returns None for blank, unparseable or unstorable input; the caller decides what
    that means (keep current value, unbounded, or zero).
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite() or not fits_record(value):
        return None
    return value


def to_decimal(value) -> Decimal:
    """
    Coerce an amount handed to a store into a Decimal.

    Floats go through str() so 45.5 becomes Decimal("45.5"), not its
    binary expansion.

    Raises:
        ValidationError: if the value is not a finite number, or is too
            large or too small to be stored
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid amount '{value}'")
    if not result.is_finite():
        raise ValidationError(f"Invalid amount '{value}'")
    if not fits_record(result):
        raise ValidationError(f"Amount {value} is out of range")
    return result


def truncate_utf8(value: str, max_bytes: int) -> str:
    """Cut a string to at most max_bytes of UTF-8 without splitting a character."""
    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def clean_text(value: Optional[str], max_bytes: int) -> str:
    """Trim surrounding whitespace and fit the text into a fixed-width field."""
    if value is None:
        return ""
    return truncate_utf8(value.strip(), max_bytes)


def is_blank(value: Optional[str]) -> bool:
    """Blank input means "keep the current value" everywhere in the system."""
    return value is None or not value.strip()
