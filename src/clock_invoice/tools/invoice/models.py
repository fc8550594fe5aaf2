"""
Records exchanged between the time-tracking host and the invoice builder.

RawEntry/RawSource are supplied by the host (one source per document, entries
in outline order). BillableEntry/BillableSource are derived per report and
never mutated.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from clock_invoice.tools.invoice.billing import to_decimal


logger = logging.getLogger(__name__)


def _coerce_minutes(value) -> Decimal:
    minutes = to_decimal(value)
    if minutes is None:
        if value is not None:
            logger.debug(f"Minutes {value!r} is not a number, using 0")
        return Decimal(0)
    return minutes


def _coerce_level(value) -> int:
    level = to_decimal(value)
    if level is None or level < 1 or level != level.to_integral_value():
        logger.debug(f"Level {value!r} is invalid, using 1")
        return 1
    return int(level)


@dataclass(frozen=True)
class RawEntry:
    """One clocked task as reported by the host."""
    level: int
    headline: str
    minutes: Decimal
    properties: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "RawEntry":
        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            properties = {}
        return cls(
            level=_coerce_level(data.get("level", 1)),
            headline=str(data.get("headline") or ""),
            minutes=_coerce_minutes(data.get("minutes")),
            properties=dict(properties),
        )


@dataclass(frozen=True)
class RawSource:
    """Entries clocked in one document, with the document's total time."""
    total_minutes: Optional[Decimal]
    entries: tuple = ()
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RawSource":
        total = data.get("total_minutes", data.get("totalMinutes"))
        entries = data.get("entries") or []
        return cls(
            total_minutes=to_decimal(total),
            entries=tuple(
                entry if isinstance(entry, RawEntry) else RawEntry.from_dict(entry)
                for entry in entries
            ),
            name=data.get("name") or data.get("file"),
        )


@dataclass(frozen=True)
class BillableEntry:
    """A RawEntry with its billable hours and cost."""
    minutes: Decimal
    hours: Decimal
    cost: Decimal
    level: int
    headline: str
    properties: dict = field(default_factory=dict)

    def get_property(self, name: str) -> Any:
        return self.properties.get(name)


@dataclass(frozen=True)
class BillableSource:
    """Billable entries of one source with totals derived from its total minutes."""
    total_minutes: Decimal
    total_hours: Decimal
    total_cost: Decimal
    entries: tuple = ()
    name: Optional[str] = None


def parse_sources(data: list) -> list[RawSource]:
    """Build RawSource records from host-supplied dicts."""
    return [
        source if isinstance(source, RawSource) else RawSource.from_dict(source)
        for source in data
    ]
