"""
Rounding and conversion helpers for billable time.

All amounts are Decimal values quantized to a fixed number of digits with
ROUND_HALF_UP (half away from zero). Every function here is total: invalid
numeric input is coerced to a safe default instead of raising.
"""

import logging
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_RATE = 80.0
DEFAULT_ACCURACY = 3

ZERO = Decimal(0)
MINUTES_PER_HOUR = Decimal(60)


def to_decimal(value) -> Optional[Decimal]:
    """Coerce a number or numeric string to Decimal. None if not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def resolve_accuracy(value, default: int = DEFAULT_ACCURACY) -> int:
    """Return value as a non-negative int, else default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default
    number = to_decimal(value)
    if number is None or number < 0 or number != number.to_integral_value():
        return default
    return int(number)


def resolve_rate(rate, default=DEFAULT_RATE) -> Decimal:
    """Effective hourly rate: rate if valid, else default, else 0."""
    effective = to_decimal(rate)
    if effective is not None:
        return effective
    if rate is not None:
        logger.debug(f"Rate {rate!r} is not a number, falling back to default {default!r}")
    effective = to_decimal(default)
    if effective is not None:
        return effective
    logger.debug(f"Default rate {default!r} is not a number, billing at 0")
    return ZERO


def round_to(value: Decimal, accuracy: int) -> Decimal:
    """Quantize to exactly `accuracy` decimal digits, half away from zero."""
    accuracy = resolve_accuracy(accuracy)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + accuracy + 2)
        return value.quantize(Decimal(1).scaleb(-accuracy), rounding=ROUND_HALF_UP)


def hours_from_minutes(minutes, accuracy: int = DEFAULT_ACCURACY) -> Decimal:
    """Convert clocked minutes to billable hours rounded to `accuracy` digits."""
    accuracy = resolve_accuracy(accuracy)
    value = to_decimal(minutes)
    if value is None:
        logger.debug(f"Minutes {minutes!r} is not a number, using 0")
        value = ZERO
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + accuracy + 30)
        hours = value / MINUTES_PER_HOUR
    return round_to(hours, accuracy)


def cost_from_hours(hours, rate, accuracy: int = DEFAULT_ACCURACY, default_rate=DEFAULT_RATE) -> Decimal:
    """Cost of `hours` at `rate`, rounded to `accuracy` digits."""
    value = to_decimal(hours)
    if value is None:
        value = ZERO
    effective_rate = resolve_rate(rate, default_rate)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + effective_rate.adjusted() + resolve_accuracy(accuracy) + 4)
        cost = value * effective_rate
    return round_to(cost, accuracy)


def format_hours(hours, accuracy: int = DEFAULT_ACCURACY) -> str:
    """Fixed-point string with exactly `accuracy` digits after the point."""
    value = to_decimal(hours)
    return format(round_to(value if value is not None else ZERO, accuracy), "f")


def format_currency(amount) -> str:
    """Render an amount as dollars with two decimals, e.g. '$126.64'."""
    value = to_decimal(amount)
    return "$" + format(round_to(value if value is not None else ZERO, 2), "f")
