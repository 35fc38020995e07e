"""
Tests for audit logging and configuration
"""

from decimal import Decimal

from pocketbook.audit import AuditLogger
from pocketbook.config import BudgetSettings, StorageSettings, get_settings, validate_all_settings
from pocketbook.models.audit import AuditEventBuilder
from pocketbook.services.storage import AuditStorageInterface


class FailingAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise OSError("disk full")

    def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_persists_events(self, audit_logger, audit_storage):
        """Test events reach the configured storage."""
        assert audit_logger.log(AuditEventBuilder.guest_session_started()) is True
        assert len(audit_storage.events) == 1
        assert audit_logger.recent_events()[0]["event_type"] == "guest_session_started"

    def test_storage_failure_does_not_raise(self):
        """Test a failing audit store never breaks the caller."""
        logger = AuditLogger(storage=FailingAuditStorage())
        assert logger.log(AuditEventBuilder.login_failed("a@b.c")) is False

    def test_without_storage(self):
        """Test logging works with no storage configured."""
        logger = AuditLogger()
        assert logger.log(AuditEventBuilder.guest_session_started()) is True
        assert logger.recent_events() == []


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_budget_defaults(self):
        """Test the budget thresholds default to the documented values."""
        settings = BudgetSettings()
        assert settings.window_days == 30
        assert settings.baseline_windows == 3
        assert settings.underspend_ratio == 0.5
        assert settings.insight_deviation == 0.3
        assert settings.default_monthly_limit == Decimal("1000")

    def test_environment_override(self, monkeypatch):
        """Test values can be overridden from the environment."""
        monkeypatch.setenv("POCKETBOOK_BUDGET_WINDOW_DAYS", "14")
        assert BudgetSettings().window_days == 14

    def test_data_dir_expands_home(self, monkeypatch):
        """Test ~ is expanded in the data directory."""
        monkeypatch.setenv("POCKETBOOK_STORAGE_DATA_DIR", "~/books")
        settings = StorageSettings()
        assert "~" not in str(settings.data_dir)
        assert settings.audit_log_path.name == "audit.jsonl"

    def test_validate_all_settings(self, monkeypatch):
        """Test an invalid group is reported with its error."""
        monkeypatch.setenv("POCKETBOOK_REPORT_DPI", "10")
        get_settings.cache_clear()

        status = validate_all_settings()

        assert status["storage"] is True
        assert status["report"] is False
        assert "report_error" in status
