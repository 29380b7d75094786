"""
Audit Logger

DESIGN DECISION: Every ledger mutation, report and file operation is
logged. This provides:
1. Traceability of what changed
2. Debugging capability for imports and loads
3. A short in-memory history the console can show

The audit logger:
- Is synchronous (the ledger has no async I/O)
- Never prints; it emits structlog events only
- Supports correlation IDs to trace the events of one menu action
"""

import logging
import sys
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _configure_structlog(json_logs: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Route structlog through stdlib logging; levels below WARNING stay
# silent until the application calls configure_logging()
_configure_structlog(json_logs=True)


def get_logger(name: str):
    """Module logger that shares the audit logging configuration."""
    return structlog.get_logger(name)


def configure_logging(level: str = "WARNING", json_logs: bool = False) -> None:
    """
    Set the log level and renderer for the application.

    Logs go to stderr so they never mix with console menu output.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
    )
    _configure_structlog(json_logs)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured log (structlog)
    2. A bounded in-memory history (recent_events)
    """

    def __init__(self, history_size: int = 100):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("finance_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(reversed(self._history))
        return events[:limit] if limit is not None else events

    def log_validation_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected core operation."""
        self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one menu choice).
    Pass it through all subsequent operations.
    """
    return uuid4()
