"""
Tests for settings and the audit logger.
"""

import pytest
from decimal import Decimal

from pydantic import ValidationError

from spendvista.audit import AuditLogger, configure_logging
from spendvista.config import AppSettings, StorageSettings, get_settings, validate_all_settings
from spendvista.models.audit import AuditEventBuilder, AuditEventType
from spendvista.services.storage import InMemoryAuditStorage


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SPENDVISTA_CURRENCY_SYMBOL", raising=False)
        monkeypatch.delenv("SPENDVISTA_BUDGET_WARNING_PERCENTAGE", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.currency_symbol == "R"
        assert settings.budget_warning_percentage == Decimal("80")
        assert settings.recent_transaction_count == 5

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SPENDVISTA_CURRENCY_SYMBOL", "$")
        monkeypatch.setenv("SPENDVISTA_BUDGET_WARNING_PERCENTAGE", "90")
        settings = AppSettings(_env_file=None)
        assert settings.currency_symbol == "$"
        assert settings.budget_warning_percentage == Decimal("90")

    def test_warning_percentage_bounds(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, budget_warning_percentage=Decimal("100"))

    def test_storage_dir_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SPENDVISTA_STORAGE_DATA_DIR", str(tmp_path))
        assert StorageSettings().data_dir == tmp_path

    def test_storage_dir_must_not_be_a_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ValidationError):
            StorageSettings(data_dir=path)

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("SPENDVISTA_RECENT_TRANSACTION_COUNT", "0")
        get_settings.cache_clear()
        try:
            status = validate_all_settings()
        finally:
            get_settings.cache_clear()
        assert status["storage"] is True
        assert status["app"] is False
        assert "app_error" in status


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_persists_event(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        assert logger.log(AuditEventBuilder.goal_deleted("1", "Car")) is True
        assert logger.storage is storage
        assert storage.get_recent_events()[0].event_type == AuditEventType.GOAL_DELETED

    def test_log_without_storage(self):
        assert AuditLogger().log(AuditEventBuilder.data_reset(0, 0)) is True

    def test_storage_failure_returns_false(self):
        class BrokenAuditStorage(InMemoryAuditStorage):
            def append_event(self, event):
                raise RuntimeError("offline")

        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.data_reset(0, 0)) is False

    def test_recent_events_and_history(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        logger.log(AuditEventBuilder.goal_created("1", "Car", Decimal("100")))
        logger.log(AuditEventBuilder.goal_deleted("1", "Car"))
        logger.log(AuditEventBuilder.data_reset(0, 0))

        assert [e.event_type for e in logger.recent_events(limit=2)] == [
            AuditEventType.DATA_RESET,
            AuditEventType.GOAL_DELETED,
        ]
        assert [e.event_type for e in logger.history("goal", "1")] == [
            AuditEventType.GOAL_CREATED,
            AuditEventType.GOAL_DELETED,
        ]
        assert AuditLogger().recent_events() == []

    def test_configure_logging_debug(self):
        configure_logging(debug=True)
        configure_logging(debug=False)
        assert AuditLogger().log(AuditEventBuilder.data_reset(1, 1)) is True

    def test_storage_fallbacks(self):
        storage = InMemoryAuditStorage()
        AuditLogger(storage).log_storage_fallbacks([("a", "bad json"), ("b", "wrong type")])
        events = storage.get_recent_events()
        assert [e.details["key"] for e in events] == ["b", "a"]
        assert events[0].error_message == "wrong type"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
