"""
Two-Stage Validation for CSV Import Rows

STAGE 1 - SCHEMA VALIDATION:
- Date follows the date-parse contract
- This catches malformed rows; they are skipped

STAGE 2 - SEMANTIC VALIDATION:
- Amount is parseable (if not, it is read as 0 and a warning recorded)
- Amount is not negative (direction belongs in the type column)
- Category name is present

IMPORTANT: An unparseable amount does not fail the row. It is imported as
0 and reported as a warning. This is accepted lenient behavior.
"""

from decimal import Decimal

from finance_tracker.models.exchange import (
    CsvTransactionRow,
    RowValidationResult,
    ValidationIssue,
)
from finance_tracker.validation.fields import (
    DATE_FORMAT_HINT,
    is_blank,
    is_valid_date,
    parse_amount,
)


class CsvRowValidator:
    """Validates import rows through a two-stage pipeline."""

    def _validate_schema(self, row: CsvTransactionRow) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not is_valid_date(row.date):
            issues.append(ValidationIssue(
                line=row.line,
                field="date",
                issue_type="invalid_date",
                message=f"Skipping invalid date '{row.date}' on line {row.line} "
                        f"(expected {DATE_FORMAT_HINT})",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        row: CsvTransactionRow,
    ) -> tuple[Decimal, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (amount_to_import, list_of_issues)
        """
        issues = []

        amount = parse_amount(row.amount_text)
        if amount is None:
            amount = Decimal("0")
            issues.append(ValidationIssue(
                line=row.line,
                field="amount",
                issue_type="unparseable_amount",
                message=f"Amount '{row.amount_text}' on line {row.line} "
                        "is not a number; imported as 0",
                severity="warning",
            ))
        elif amount < 0:
            issues.append(ValidationIssue(
                line=row.line,
                field="amount",
                issue_type="negative_amount",
                message=f"Negative amount {amount} on line {row.line}; "
                        "use the type column for income",
                severity="error",
            ))

        if is_blank(row.category_name):
            issues.append(ValidationIssue(
                line=row.line,
                field="category",
                issue_type="missing",
                message=f"Category name missing on line {row.line}",
                severity="error",
            ))

        return amount, issues

    def validate(self, row: CsvTransactionRow) -> RowValidationResult:
        """
        Run the two-stage pipeline on one row.

        Stage 2 only runs when stage 1 passes.
        """
        schema_valid, issues = self._validate_schema(row)
        if not schema_valid:
            return RowValidationResult(row=row, issues=issues)

        amount, semantic_issues = self._validate_semantic(row)
        return RowValidationResult(row=row, amount=amount, issues=issues + semantic_issues)

    @staticmethod
    def too_few_columns(line: int, found: int, expected: int) -> ValidationIssue:
        return ValidationIssue(
            line=line,
            field="row",
            issue_type="too_few_columns",
            message=f"Line {line} has {found} columns, expected at least {expected}",
            severity="error",
        )
