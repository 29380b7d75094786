"""CSV import/export package."""

from finance_tracker.services.exchange.csv_exchange import (
    ExchangeError,
    export_csv,
    import_csv,
)

__all__ = ["ExchangeError", "export_csv", "import_csv"]
