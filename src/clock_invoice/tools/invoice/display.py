"""
Time display mode for invoice reports.

'hours' renders billable decimal hours, 'duration' renders the raw clocked
time as h:mm.

The server keeps one DisplayModeState per process (`display_state`). Report
generation only reads it. The server seeds it from the stored time_display
setting; afterwards the toggle tool and invoice_config set/reset change it.
A report's own time_display option overrides it for that report without
changing it.
"""

import logging
from enum import Enum
from typing import Optional, Union

from clock_invoice.settings import settings
from clock_invoice.tools.invoice.billing import format_hours
from clock_invoice.tools.invoice.duration import minutes_to_duration


logger = logging.getLogger(__name__)


class TimeDisplay(str, Enum):
    HOURS = "hours"
    DURATION = "duration"

    @classmethod
    def parse(cls, value) -> Optional["TimeDisplay"]:
        """Return the matching mode, or None for unknown values."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None

    def flipped(self) -> "TimeDisplay":
        return TimeDisplay.DURATION if self is TimeDisplay.HOURS else TimeDisplay.HOURS


def render_time(mode: TimeDisplay, minutes, hours, accuracy: int) -> str:
    """Render a (minutes, hours) pair in the given mode."""
    if mode is TimeDisplay.DURATION:
        return minutes_to_duration(minutes)
    return format_hours(hours, accuracy)


class DisplayModeState:
    """Display mode of one editing context."""

    def __init__(self, mode: Union[TimeDisplay, str] = TimeDisplay.HOURS):
        self._mode = TimeDisplay.parse(mode) or TimeDisplay.HOURS

    @property
    def mode(self) -> TimeDisplay:
        return self._mode

    def set(self, mode: Union[TimeDisplay, str]) -> TimeDisplay:
        parsed = TimeDisplay.parse(mode)
        if parsed is None:
            raise ValueError(f"Unknown time display mode: {mode}. Use: hours, duration")
        self._mode = parsed
        return self._mode

    def toggle(self) -> TimeDisplay:
        self._mode = self._mode.flipped()
        logger.info(f"Time display switched to {self._mode.value}")
        return self._mode

    def render(self, minutes, hours, accuracy: int) -> str:
        return render_time(self._mode, minutes, hours, accuracy)


# Process-scoped state used by the MCP tools
display_state = DisplayModeState(settings.default_time_display)


async def invoice_toggle_time_display() -> dict:
    """
    Toggle invoice time display between billable hours and raw duration.

    Switches the time columns of subsequent invoice reports between decimal
    billable hours (e.g. '1.583') and clocked duration (e.g. '1:35').
    Regenerate the report afterwards to see the change.

    Returns:
        Dict with the new time_display mode and refresh=True
    """
    mode = display_state.toggle()
    return {
        "time_display": mode.value,
        "refresh": True,
        "message": f"Invoice time display: {mode.value}. Regenerate the report to apply.",
    }
