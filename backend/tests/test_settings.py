# backend/tests/test_settings.py

import logging

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings
from core.logging_config import configure_logging


class TestSettings:
    """Test configuration loading and validation"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.equipment_alert_days_ahead == 30
        assert settings.slow_query_threshold_seconds == 1.0

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_negative_alert_window(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, equipment_alert_days_ahead=-1)

    def test_production_refuses_debug(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", debug=True)

        settings = Settings(_env_file=None, environment="production", debug=False)
        assert settings.is_production is True
        assert settings.is_development is False

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("EQUIPMENT_ALERT_DAYS_AHEAD", "14")

        assert Settings(_env_file=None).equipment_alert_days_ahead == 14

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Test root logger setup"""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_configure_logging_idempotent(self):
        settings = Settings(_env_file=None, log_level="warning")

        configure_logging(settings)
        configure_logging(settings)

        root = logging.getLogger()
        marked = [h for h in root.handlers if getattr(h, "_quality_handler", False)]
        assert len(marked) == 1
        assert root.level == logging.WARNING
