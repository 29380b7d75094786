"""Tests for the audit logger."""

from finance_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from finance_tracker.models import AuditEventBuilder, AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_recent_events_newest_first(self):
        """Test history is returned newest first."""
        audit = AuditLogger()
        audit.log(AuditEventBuilder.category_added(1, "A"))
        audit.log(AuditEventBuilder.category_removed(1))
        assert [e.event_type for e in audit.recent_events()] == [
            AuditEventType.CATEGORY_REMOVED,
            AuditEventType.CATEGORY_ADDED,
        ]
        assert len(audit.recent_events(1)) == 1

    def test_history_is_bounded(self):
        """Test only the last history_size events are kept."""
        audit = AuditLogger(history_size=3)
        for category_id in range(1, 6):
            audit.log(AuditEventBuilder.category_added(category_id, "x"))
        assert [e.entity_id for e in audit.recent_events()] == [5, 4, 3]

    def test_log_validation_failed(self):
        """Test rejected operations are recorded as warnings."""
        audit = AuditLogger()
        correlation_id = create_correlation_id()
        audit.log_validation_failed("set_budget", "Month 13 outside 1-12", correlation_id)
        event = audit.recent_events(1)[0]
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "Month 13 outside 1-12"
        assert event.correlation_id == correlation_id

    def test_log_error(self):
        """Test system errors are recorded with details."""
        audit = AuditLogger()
        audit.log_error("StorageError", "disk full", details={"operation": "save"})
        event = audit.recent_events(1)[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details == {"operation": "save"}

    def test_logging_after_configure(self):
        """Test events can be logged with either renderer."""
        audit = AuditLogger()
        configure_logging("DEBUG", json_logs=True)
        audit.log(AuditEventBuilder.obfuscation_toggled(True))
        configure_logging("WARNING", json_logs=False)
        audit.log(AuditEventBuilder.obfuscation_toggled(False))
        assert len(audit.recent_events()) == 2
