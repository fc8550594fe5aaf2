"""
Duration strings as used by outline time trackers.

Parses effort estimates such as '1:30', '0:45:00', '2h', '1d 3:12' or a bare
number of minutes, and renders minutes back as 'h:mm'.
"""

import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional

from clock_invoice.tools.invoice.billing import to_decimal


# Minutes per unit
DURATION_UNITS = {
    "min": 1,
    "h": 60,
    "d": 60 * 24,
    "w": 60 * 24 * 7,
    "m": 60 * 24 * 30,
    "y": 60 * 24 * 365.25,
}

_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d*)?")
_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<hours>\d+):(?P<minutes>\d{2})(?::(?P<seconds>\d{2}))?"
    r"|(?P<amount>\d+(?:\.\d*)?)\s*(?P<unit>min|h|d|w|m|y)(?![a-z])"
    r")\s*"
)


def duration_to_minutes(value) -> Optional[float]:
    """
    Convert a duration to minutes.

    Numbers are taken as minutes. Returns None for anything unparseable.
    """
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        number = to_decimal(value)
        return float(number) if number is not None else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if _PLAIN_NUMBER.fullmatch(text):
        return float(text)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if not match or match.end() == pos:
            return None
        if match.group("hours") is not None:
            total += int(match.group("hours")) * 60 + int(match.group("minutes"))
            if match.group("seconds") is not None:
                total += int(match.group("seconds")) / 60
        else:
            total += float(match.group("amount")) * DURATION_UNITS[match.group("unit")]
        pos = match.end()
    return total


def minutes_to_duration(minutes) -> str:
    """Render minutes as 'h:mm', rounding to whole minutes."""
    value = to_decimal(minutes)
    if value is None:
        value = Decimal(0)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 2)
        whole = int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    sign = "-" if whole < 0 else ""
    hours, rest = divmod(abs(whole), 60)
    return f"{sign}{hours}:{rest:02d}"
