"""
Audit Models for the Finance Tracker

Every mutation of the ledger, every report and every file operation is
logged for audit purposes. This provides:
1. Traceability of what changed and when
2. Debugging information when an import or load goes wrong
3. A record of skipped or leniently-imported CSV rows

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store mutation and gateway action has its own event type.
    """
    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_RENAMED = "category_renamed"
    CATEGORY_REMOVED = "category_removed"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_REMOVED = "transaction_removed"

    # Budgets
    BUDGET_SET = "budget_set"

    # Queries
    REPORT_GENERATED = "report_generated"
    SEARCH_EXECUTED = "search_executed"

    # Exchange
    IMPORT_COMPLETED = "import_completed"
    IMPORT_ROW_SKIPPED = "import_row_skipped"
    EXPORT_COMPLETED = "export_completed"

    # Persistence
    DATA_LOADED = "data_loaded"
    DATA_SAVED = "data_saved"
    OBFUSCATION_TOGGLED = "obfuscation_toggled"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'category', 'transaction', 'budget')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Id of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one menu action)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.category_added(category_id, name)
        event = AuditEventBuilder.import_completed(path, imported, skipped)
    """

    @staticmethod
    def category_added(
        category_id: int,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def category_renamed(
        category_id: int,
        old_name: str,
        new_name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_RENAMED,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category renamed: {old_name} -> {new_name}",
            details={"old_name": old_name, "new_name": new_name},
            is_user_action=True,
        )

    @staticmethod
    def category_removed(
        category_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_REMOVED,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Category {category_id} removed",
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        kind: str,
        amount: str,
        category_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {kind} {amount}",
            details={
                "kind": kind,
                "amount": amount,
                "category_id": category_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_edited(
        transaction_id: int,
        changed_fields: list[str],
        warnings: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_EDITED,
            severity=AuditSeverity.WARNING if warnings else AuditSeverity.INFO,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} edited ({len(changed_fields)} fields)",
            details={
                "changed_fields": changed_fields,
                "warnings": warnings,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_removed(
        transaction_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} removed",
            is_user_action=True,
        )

    @staticmethod
    def budget_set(
        category_id: int,
        year: int,
        month: int,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            entity_type="budget",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Budget set for {year:04d}-{month:02d}: {amount}",
            details={
                "year": year,
                "month": month,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        report: str,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            correlation_id=correlation_id,
            description=f"Report generated: {report} {year:04d}-{month:02d}",
            details={"report": report, "year": year, "month": month},
        )

    @staticmethod
    def search_executed(
        criteria: dict,
        result_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_EXECUTED,
            entity_type="query",
            correlation_id=correlation_id,
            description=f"Search returned {result_count} results",
            details={"criteria": criteria, "result_count": result_count},
        )

    @staticmethod
    def import_completed(
        source: str,
        imported: int,
        skipped: int,
        created_categories: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            severity=AuditSeverity.WARNING if skipped else AuditSeverity.INFO,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Imported {imported} transactions from {source}",
            details={
                "source": source,
                "imported": imported,
                "skipped": skipped,
                "created_categories": created_categories,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_row_skipped(
        source: str,
        line: int,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_ROW_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Skipped line {line} of {source}",
            details={"source": source, "line": line, "reason": reason},
        )

    @staticmethod
    def export_completed(
        destination: str,
        exported: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Exported {exported} transactions to {destination}",
            details={"destination": destination, "exported": exported},
            is_user_action=True,
        )

    @staticmethod
    def data_loaded(
        categories: int,
        transactions: int,
        budgets: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            description="Ledger data loaded",
            details={
                "categories": categories,
                "transactions": transactions,
                "budgets": budgets,
            },
        )

    @staticmethod
    def data_saved(
        categories: int,
        transactions: int,
        budgets: int,
        obfuscated: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_SAVED,
            description="Ledger data saved",
            details={
                "categories": categories,
                "transactions": transactions,
                "budgets": budgets,
                "obfuscated": obfuscated,
            },
        )

    @staticmethod
    def obfuscation_toggled(enabled: bool) -> AuditEvent:
        # The key itself is never logged
        return AuditEvent(
            event_type=AuditEventType.OBFUSCATION_TOGGLED,
            description=f"File obfuscation {'enabled' if enabled else 'disabled'}",
            details={"enabled": enabled},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
