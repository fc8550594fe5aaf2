"""
Configuration management for clock invoice.

Handles:
- Config directory paths (~/.mcp/clock-invoice/)
- Config file read/write
- Global billing defaults (rate, accuracy) saved by the user
- Persisted time display mode for CLI sessions
"""

import json
import logging
import math
import os
from pathlib import Path
from typing import Optional

from clock_invoice.settings import settings


logger = logging.getLogger(__name__)

TIME_DISPLAY_MODES = ("hours", "duration")


def get_app_dir() -> Path:
    """Get app directory: ~/.mcp/clock-invoice"""
    settings.ensure_dirs()
    return settings.data_dir


def get_config_path() -> Path:
    """Get config file path: ~/.mcp/clock-invoice/config.json"""
    return get_app_dir() / "config.json"


def load_config() -> dict:
    """Load config from file. Returns default config if not exists."""
    config_path = get_config_path()

    default_config = {
        "rate": None,
        "accuracy": None,
        "time_display": None,
    }

    if not config_path.exists():
        return default_config

    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
        return default_config

    if not isinstance(config, dict):
        logger.warning(f"Ignoring config file {config_path}: expected an object")
        return default_config

    return {**default_config, **config}


def save_config(config: dict) -> None:
    """Save config to file with secure permissions."""
    config_path = get_config_path()
    config_path.write_text(
        json.dumps(config, indent=2, ensure_ascii=False),
        encoding="utf-8"
    )
    os.chmod(config_path, 0o600)


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


# =============================================================================
# Billing defaults
# =============================================================================

def get_default_rate() -> Optional[float]:
    """
    Global hourly rate: config file value, else environment setting.

    Returns None when neither is a valid number, so callers fall back to 0.
    """
    value = load_config().get("rate")
    if _is_number(value):
        return float(value)
    if value is not None:
        logger.warning(f"Configured rate {value!r} is not a number, using settings default")
    if _is_number(settings.default_rate):
        return float(settings.default_rate)
    return None


def get_default_accuracy() -> int:
    """Global rounding accuracy: config file value, else environment setting."""
    value = load_config().get("accuracy")
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if value is not None:
        logger.warning(f"Configured accuracy {value!r} is invalid, using settings default")
    return settings.default_accuracy


def get_time_display() -> str:
    """Persisted time display mode, else the environment default."""
    value = load_config().get("time_display")
    if value in TIME_DISPLAY_MODES:
        return value
    return settings.default_time_display


def set_time_display(mode: str) -> None:
    """Persist time display mode."""
    if mode not in TIME_DISPLAY_MODES:
        raise ValueError(f"Unknown time display mode: {mode}. Use: {', '.join(TIME_DISPLAY_MODES)}")
    config = load_config()
    config["time_display"] = mode
    save_config(config)


def set_option(key: str, value) -> None:
    """Store a global billing default in the config file."""
    config = load_config()
    config[key] = value
    save_config(config)


def reset_option(key: str) -> bool:
    """Remove a stored override. Returns True if something was removed."""
    config = load_config()
    if config.get(key) is None:
        return False
    config[key] = None
    save_config(config)
    return True
