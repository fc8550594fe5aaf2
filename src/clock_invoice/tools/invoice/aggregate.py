"""
Turn host records into billable tables.

Entry hours/cost are derived from each entry's own minutes. Source totals are
derived from the source's total minutes, not summed from rounded entries, so a
subtotal can differ from the sum of its rows in the last digit.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from clock_invoice.tools.invoice.billing import (
    cost_from_hours,
    hours_from_minutes,
    to_decimal,
)
from clock_invoice.tools.invoice.models import (
    BillableEntry,
    BillableSource,
    RawEntry,
    RawSource,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrandTotals:
    """Sums of per-source totals."""
    minutes: Decimal
    hours: Decimal
    cost: Decimal

    @property
    def is_billable(self) -> bool:
        return self.minutes > 0


def transform_entry(entry: RawEntry, rate: Decimal, accuracy: int) -> BillableEntry:
    """Compute hours and cost for one entry."""
    hours = hours_from_minutes(entry.minutes, accuracy)
    return BillableEntry(
        minutes=entry.minutes,
        hours=hours,
        cost=cost_from_hours(hours, rate, accuracy),
        level=entry.level,
        headline=entry.headline,
        properties=dict(entry.properties),
    )


def is_billable_source(source: RawSource) -> bool:
    """Sources without clocked time are left out of the report."""
    total = to_decimal(source.total_minutes)
    return total is not None and total > 0


def build_source(source: RawSource, rate: Decimal, accuracy: int) -> BillableSource:
    total_minutes = to_decimal(source.total_minutes)
    total_hours = hours_from_minutes(total_minutes, accuracy)
    return BillableSource(
        total_minutes=total_minutes,
        total_hours=total_hours,
        total_cost=cost_from_hours(total_hours, rate, accuracy),
        entries=tuple(transform_entry(entry, rate, accuracy) for entry in source.entries),
        name=source.name,
    )


def build_tables(sources: Iterable[RawSource], rate: Decimal, accuracy: int) -> list[BillableSource]:
    """Drop empty sources and convert the rest, keeping their order."""
    tables = []
    for source in sources:
        if not is_billable_source(source):
            logger.debug(f"Skipping source {source.name or '<unnamed>'}: no clocked time")
            continue
        tables.append(build_source(source, rate, accuracy))
    return tables


def compute_totals(tables: Iterable[BillableSource]) -> GrandTotals:
    minutes = hours = cost = Decimal(0)
    for table in tables:
        minutes += table.total_minutes
        hours += table.total_hours
        cost += table.total_cost
    return GrandTotals(minutes=minutes, hours=hours, cost=cost)
