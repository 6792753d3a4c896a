"""
Tests for configuration, formatting and logging setup.
"""

import logging

from utils import Config, configure_logging, format_currency, format_percent


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("HOST", "PORT", "DEBUG", "LOG_LEVEL", "DATA_DIR", "PERMISSIONS_STORE_PATH", "REPORTS_DIR"):
            monkeypatch.delenv(name, raising=False)

        config = Config.load()

        assert config.port == 8000
        assert config.debug is False
        assert config.log_level == "INFO"
        assert str(config.resolved_permissions_path).endswith("permissions.json")

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PORT", "9100")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PERMISSIONS_STORE_PATH", str(tmp_path / "grants.json"))

        config = Config.load()

        assert config.port == 9100
        assert config.debug is True
        assert config.log_level == "DEBUG"
        assert config.to_dict()["permissions_store_path"] == str(tmp_path / "grants.json")


class TestLogging:
    def test_configure_logging_sets_level(self):
        configure_logging(Config(log_level="WARNING"))
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(Config(log_level="CHATTY"))
        assert logging.getLogger().level == logging.INFO


class TestFormatting:
    def test_currency(self):
        assert format_currency(1250000) == "KES 1,250,000"
        assert format_currency(None) == "-"
        assert format_currency(99.6, "USD") == "$100"

    def test_percent(self):
        assert format_percent(57) == "57%"
        assert format_percent(57.14, 1) == "57.1%"
