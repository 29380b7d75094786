"""
Tests for configuration loading

Environment variables are set with monkeypatch; the get_settings cache is
cleared around each test.
"""

import pytest
from pathlib import Path

from finance_tracker.config import (
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self, monkeypatch):
        """Test data files default to the current directory."""
        monkeypatch.delenv("FINANCE_STORAGE_DATA_DIR", raising=False)
        settings = StorageSettings(_env_file=None)
        assert settings.categories_path == Path(".") / "categories.dat"
        assert settings.transactions_path.name == "transactions.dat"
        assert settings.budgets_path.name == "budgets.dat"

    def test_env_prefix(self, monkeypatch, tmp_path):
        """Test FINANCE_STORAGE_ variables are read."""
        monkeypatch.setenv("FINANCE_STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("FINANCE_STORAGE_BUDGETS_FILE", "limits.dat")
        settings = StorageSettings(_env_file=None)
        assert settings.budgets_path == tmp_path / "limits.dat"

    def test_obfuscation_key(self):
        """Test a single-character key maps to its byte value."""
        assert StorageSettings(obfuscation_key="k").obfuscation_key_byte == ord("k")
        assert StorageSettings(obfuscation_key="").obfuscation_key_byte is None

    def test_obfuscation_key_must_be_one_character(self):
        """Test longer keys are rejected."""
        with pytest.raises(ValueError):
            StorageSettings(obfuscation_key="key")


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_normalised(self):
        """Test log levels are upper-cased."""
        assert AppSettings(log_level="info").log_level == "INFO"

    def test_unknown_log_level(self):
        """Test unknown levels are rejected."""
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")

    def test_debug_mode_forces_debug_level(self):
        """Test debug mode overrides the configured level."""
        assert AppSettings(debug_mode=True, log_level="ERROR").effective_log_level == "DEBUG"

    def test_every_field_is_consumed(self):
        """Test only settings the application reads are declared."""
        assert set(AppSettings.model_fields) == {
            "debug_mode",
            "log_level",
            "log_json",
            "default_export_path",
        }

    def test_default_export_path(self):
        """Test the export default."""
        assert AppSettings(_env_file=None).default_export_path == "export.csv"


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_all_valid(self):
        """Test a clean environment validates."""
        status = validate_all_settings()
        assert status["storage"] is True
        assert status["app"] is True

    def test_reports_bad_section(self, monkeypatch):
        """Test an invalid variable marks its section and explains why."""
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        status = validate_all_settings()
        assert status["app"] is False
        assert "chatty" in status["app_error"]
