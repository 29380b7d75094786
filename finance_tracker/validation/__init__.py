"""Input validation package."""

from finance_tracker.validation.fields import (
    DATE_FORMAT_HINT,
    MAX_CATEGORY_NAME_BYTES,
    MAX_NOTE_BYTES,
    clean_text,
    fits_record,
    is_blank,
    is_valid_date,
    parse_amount,
    parse_date,
    to_decimal,
    truncate_utf8,
    validate_month,
    validate_year,
)

__all__ = [
    "DATE_FORMAT_HINT",
    "MAX_CATEGORY_NAME_BYTES",
    "MAX_NOTE_BYTES",
    "clean_text",
    "fits_record",
    "is_blank",
    "is_valid_date",
    "parse_amount",
    "parse_date",
    "to_decimal",
    "truncate_utf8",
    "validate_month",
    "validate_year",
]
