"""
Tests for the config file layer.
"""

import pytest

from clock_invoice.settings import Settings, settings
from clock_invoice.utils.config import (
    get_config_path,
    get_default_accuracy,
    get_default_rate,
    get_time_display,
    load_config,
    reset_option,
    save_config,
    set_option,
    set_time_display,
)


class TestLoadConfig:

    def test_missing_file_returns_defaults(self, temp_app_dir):
        assert load_config() == {"rate": None, "accuracy": None, "time_display": None}

    def test_corrupt_file_returns_defaults(self, temp_app_dir):
        get_config_path().write_text("{not json", encoding="utf-8")
        assert load_config()["rate"] is None

    def test_non_object_returns_defaults(self, temp_app_dir):
        get_config_path().write_text("[1, 2]", encoding="utf-8")
        assert load_config()["accuracy"] is None

    def test_keeps_unknown_keys(self, temp_app_dir):
        save_config({"rate": 90, "note": "client rate"})
        config = load_config()
        assert config["note"] == "client rate"
        assert config["time_display"] is None


class TestBillingDefaults:

    def test_fall_back_to_settings(self, temp_app_dir):
        assert get_default_rate() == settings.default_rate
        assert get_default_accuracy() == settings.default_accuracy
        assert get_time_display() == settings.default_time_display

    def test_stored_values(self, temp_app_dir):
        set_option("rate", 95)
        set_option("accuracy", 2)
        assert get_default_rate() == 95.0
        assert get_default_accuracy() == 2

    def test_invalid_stored_values_ignored(self, temp_app_dir):
        save_config({"rate": "ninety", "accuracy": -3, "time_display": "weeks"})
        assert get_default_rate() == settings.default_rate
        assert get_default_accuracy() == settings.default_accuracy
        assert get_time_display() == settings.default_time_display

    def test_time_display_persisted(self, temp_app_dir):
        set_time_display("duration")
        assert get_time_display() == "duration"
        with pytest.raises(ValueError):
            set_time_display("weeks")

    def test_reset_option(self, temp_app_dir):
        set_option("rate", 95)
        assert reset_option("rate") is True
        assert reset_option("rate") is False
        assert load_config()["rate"] is None


class TestSettings:

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CLOCK_INVOICE_DEFAULT_RATE", "120.5")
        monkeypatch.setenv("CLOCK_INVOICE_DEFAULT_TIME_DISPLAY", "duration")
        env_settings = Settings()
        assert env_settings.default_rate == 120.5
        assert env_settings.default_time_display == "duration"

    def test_defaults(self, monkeypatch):
        for name in ("RATE", "ACCURACY", "TIME_DISPLAY"):
            monkeypatch.delenv(f"CLOCK_INVOICE_DEFAULT_{name}", raising=False)
        defaults = Settings(_env_file=None)
        assert defaults.default_rate == 80.0
        assert defaults.default_accuracy == 3
        assert defaults.default_time_display == "hours"
