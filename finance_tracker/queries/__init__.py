"""Query and report package."""

from finance_tracker.queries.engine import ReportEngine, month_window

__all__ = ["ReportEngine", "month_window"]
