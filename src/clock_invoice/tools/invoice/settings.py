"""
Settings management tool for invoices.

Configure the global hourly rate, rounding accuracy and time display mode.
"""

from typing import Optional

from clock_invoice.settings import settings
from clock_invoice.tools.invoice.billing import resolve_accuracy, to_decimal
from clock_invoice.tools.invoice.display import TimeDisplay, display_state
from clock_invoice.utils.config import (
    get_default_accuracy,
    get_default_rate,
    get_time_display,
    load_config,
    reset_option,
    set_option,
)


VALID_SETTINGS = {
    "rate": "Default hourly rate for reports without :rate (e.g., '80')",
    "accuracy": "Decimal digits for billable hours and cost (e.g., '3')",
    "time_display": "Time columns: 'hours' (decimal billable hours) or 'duration' (h:mm)",
}


def _effective_settings() -> dict:
    return {
        "rate": get_default_rate(),
        "accuracy": get_default_accuracy(),
        "time_display": get_time_display(),
    }


def _validate(key: str, value: str):
    """Return (parsed value, error message)."""
    if key == "rate":
        number = to_decimal(value)
        if number is None:
            return None, "rate must be a number"
        if number < 0:
            return None, "rate must not be negative"
        return float(number), None

    if key == "accuracy":
        accuracy = resolve_accuracy(value, default=-1)
        if accuracy < 0:
            return None, "accuracy must be a non-negative integer"
        return accuracy, None

    mode = TimeDisplay.parse(value)
    if mode is None:
        return None, "time_display must be 'hours' or 'duration'"
    return mode.value, None


async def invoice_config(
    action: str,
    key: Optional[str] = None,
    value: Optional[str] = None,
) -> dict:
    """
    Manage global invoice defaults.

    Args:
        action: Operation - 'get', 'set', 'reset', 'list'
        key: Setting key (required for get/set/reset)
        value: Setting value (required for set)

    Returns:
        Dict with operation result:
        - get: {key, value, description}
        - set: {key, value, status: 'updated'}
        - reset: {key, value, status: 'reset'} (value falls back to environment default)
        - list: {settings: {...}, stored: {...}, descriptions: {...}}

    Available settings:
        - rate: Default hourly rate (environment default: CLOCK_INVOICE_DEFAULT_RATE)
        - accuracy: Rounding digits (environment default: CLOCK_INVOICE_DEFAULT_ACCURACY)
        - time_display: 'hours' or 'duration'; also switches this server's display mode

    Per-report options (:rate, :accuracy, :time_display) always win over these.
    """
    if action == "list":
        return {
            "settings": _effective_settings(),
            "stored": {k: v for k, v in load_config().items() if k in VALID_SETTINGS},
            "defaults": {
                "rate": settings.default_rate,
                "accuracy": settings.default_accuracy,
                "time_display": settings.default_time_display,
            },
            "descriptions": VALID_SETTINGS,
        }

    if action not in ("get", "set", "reset"):
        return {"error": f"Unknown action: {action}. Use: get, set, reset, list"}

    if not key:
        return {"error": "Key is required"}
    if key not in VALID_SETTINGS:
        return {"error": f"Unknown setting: {key}. Valid: {list(VALID_SETTINGS.keys())}"}

    if action == "get":
        return {
            "key": key,
            "value": _effective_settings()[key],
            "description": VALID_SETTINGS[key],
        }

    if action == "reset":
        removed = reset_option(key)
        if key == "time_display":
            display_state.set(get_time_display())
        return {
            "status": "reset" if removed else "unchanged",
            "key": key,
            "value": _effective_settings()[key],
        }

    if value is None:
        return {"error": "Value is required"}

    parsed, error = _validate(key, str(value))
    if error:
        return {"error": error}

    set_option(key, parsed)
    if key == "time_display":
        display_state.set(parsed)
    return {"status": "updated", "key": key, "value": parsed}
