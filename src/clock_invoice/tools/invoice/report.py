"""
Invoice report tool.

Builds a pipe-delimited billing table from clocked time:

    #+CAPTION: Clock summary at [2026-10-18 Sun 14:05]
    | Task | Time | Billable |
    |-
    | Client work | 1.583 | $126.64 |
    | - Review | 0.500 | $40.00 |
    |-
    | Totals | 1.583 | $126.64 |
    #+TBLFM: ...

Alignment of the table and formula recalculation are left to the host; the
returned InvoiceReport says which of them are needed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional, Sequence, TextIO, Union

from clock_invoice.settings import settings
from clock_invoice.tools.invoice.aggregate import build_tables, compute_totals
from clock_invoice.tools.invoice.billing import (
    format_currency,
    hours_from_minutes,
    resolve_accuracy,
    resolve_rate,
)
from clock_invoice.tools.invoice.display import (
    DisplayModeState,
    TimeDisplay,
    display_state,
    render_time,
)
from clock_invoice.tools.invoice.duration import duration_to_minutes
from clock_invoice.tools.invoice.models import BillableEntry, RawSource, parse_sources
from clock_invoice.tools.invoice.options import (
    InvoiceConfig,
    OptionalColumn,
    handle_config_errors,
    parse_block_params,
)
from clock_invoice.utils.config import get_default_accuracy, get_default_rate


logger = logging.getLogger(__name__)


CLOCK_SUMMARY_AT = {
    "en": "Clock summary at",
    "de": "Erstellt am",
    "es": "Resumen a fecha de",
    "fr": "Horodatage sommaire à",
    "nl": "Tijdsoverzicht op",
}

ROW_SEPARATOR = "|-"
FORMULA_PREFIX = "#+TBLFM: "


@dataclass
class InvoiceReport:
    """Report text plus the follow-up work requested from the host."""
    lines: list = field(default_factory=list)
    align: bool = True
    recalculate: bool = False
    row_count: int = 0

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def translate_caption(lang: Optional[str]) -> str:
    return CLOCK_SUMMARY_AT.get((lang or "en").lower(), CLOCK_SUMMARY_AT["en"])


def make_caption(config: InvoiceConfig, now: datetime, range_text: Optional[str] = None) -> str:
    """Custom header, or '#+CAPTION: Clock summary at [timestamp]' with an optional range."""
    if config.header is not None:
        return config.header.rstrip("\n")
    stamp = now.strftime("[%Y-%m-%d %a %H:%M]")
    suffix = f", for {range_text}." if range_text else ""
    return f"#+CAPTION: {translate_caption(config.lang)} {stamp}{suffix}"


def _bold(text: str, emphasize: bool) -> str:
    return f"*{text}*" if emphasize and text else text


def _escape(text: str) -> str:
    """A literal '|' would split the cell."""
    return text.replace("|", "\\vert{}")


def _row(cells: list) -> str:
    return "| " + " | ".join(_escape(cell) for cell in cells) + " |"


def _indent(headline: str, level: int) -> str:
    if level <= 1:
        return headline
    return settings.indent_marker * (level - 1) + " " + headline


class _RowRenderer:
    """Renders rows for one report; schema and mode are fixed per report."""

    def __init__(self, config: InvoiceConfig, mode: TimeDisplay, accuracy: int):
        self.schema = config.schema
        self.emphasize = config.emphasize
        self.mode = mode
        self.accuracy = accuracy

    def time(self, minutes, hours) -> str:
        return render_time(self.mode, minutes, hours, self.accuracy)

    def effort(self, entry: BillableEntry) -> str:
        value = entry.get_property(OptionalColumn.EFFORT.value)
        if value is None:
            return ""
        minutes = duration_to_minutes(value)
        if minutes is None:
            logger.debug(f"Cannot read Effort {value!r} of '{entry.headline}'")
            return ""
        return _bold(self.time(minutes, hours_from_minutes(minutes, self.accuracy)), True)

    def comment(self, entry: BillableEntry) -> str:
        value = entry.get_property(OptionalColumn.COMMENT.value)
        return "" if value is None else str(value)

    def header(self) -> str:
        return _row(self.schema.labels)

    def entry(self, entry: BillableEntry) -> str:
        strong = self.emphasize and entry.level == 1
        cells = [_bold(_indent(entry.headline, entry.level), strong)]
        if self.schema.has_effort:
            cells.append(self.effort(entry))
        cells.append(_bold(self.time(entry.minutes, entry.hours), strong))
        cells.append(_bold(format_currency(entry.cost), strong))
        if self.schema.has_comment:
            cells.append(self.comment(entry))
        return _row(cells)

    def totals(self, minutes, hours, cost) -> str:
        cells = [_bold("Totals", self.emphasize)]
        if self.schema.has_effort:
            cells.append("")
        cells.append(_bold(self.time(minutes, hours), self.emphasize))
        cells.append(_bold(format_currency(cost), self.emphasize))
        if self.schema.has_comment:
            cells.append("")
        return _row(cells)


def _resolve_mode(config: InvoiceConfig, display: Union[DisplayModeState, TimeDisplay, str, None]) -> TimeDisplay:
    if config.time_display is not None:
        return config.time_display
    if isinstance(display, DisplayModeState):
        return display.mode
    return TimeDisplay.parse(display) or TimeDisplay.HOURS


def assemble_report(
    sources: Sequence[RawSource],
    config: Union[InvoiceConfig, Mapping, None] = None,
    display: Union[DisplayModeState, TimeDisplay, str, None] = None,
    *,
    default_rate=None,
    default_accuracy: Optional[int] = None,
    range_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> InvoiceReport:
    """
    Build the invoice table for the given sources.

    Args:
        sources: RawSource records (or host dicts), one per document
        config: InvoiceConfig or flat option mapping
        display: display state or mode; a time_display option wins over it
        default_rate: rate used when config has none (settings default if None)
        default_accuracy: accuracy used when config has none
        range_text: date range description for the caption
        now: caption timestamp (current time if None)

    Raises:
        InvoiceConfigError: invalid formula option, before any text is built
    """
    if not isinstance(config, InvoiceConfig):
        config = InvoiceConfig.from_mapping(config)

    if default_rate is None:
        default_rate = settings.default_rate
    if default_accuracy is None:
        default_accuracy = settings.default_accuracy

    accuracy = config.accuracy if config.accuracy is not None else resolve_accuracy(default_accuracy)
    rate = resolve_rate(config.rate, default_rate)
    mode = _resolve_mode(config, display)

    tables = build_tables(parse_sources(list(sources)), rate, accuracy)
    totals = compute_totals(tables)
    renderer = _RowRenderer(config, mode, accuracy)

    report = InvoiceReport()
    report.lines.append(make_caption(config, now or datetime.now(), range_text))
    report.lines.append(renderer.header())

    if totals.is_billable:
        for table in tables:
            for entry in table.entries:
                if entry.level == 1:
                    report.lines.append(ROW_SEPARATOR)
                report.lines.append(renderer.entry(entry))
                report.row_count += 1
        report.lines.append(ROW_SEPARATOR)
        report.lines.append(renderer.totals(totals.minutes, totals.hours, totals.cost))
    else:
        logger.debug("No billable time in any source, emitting header only")

    if config.formula is not None:
        report.lines.append(FORMULA_PREFIX + config.formula)
        report.recalculate = True

    logger.debug(
        f"Built invoice: {len(tables)} sources, {report.row_count} rows, "
        f"rate={rate}, accuracy={accuracy}, time_display={mode.value}"
    )
    return report


def write_report(out: TextIO, sources: Sequence[RawSource], config=None, display=None, **kwargs) -> InvoiceReport:
    """Build the report, then write it to `out`. Nothing is written on error."""
    report = assemble_report(sources, config, display, **kwargs)
    out.write(report.text)
    return report


def insert_report(document: str, position: int, sources: Sequence[RawSource], config=None, display=None, **kwargs) -> tuple[str, InvoiceReport]:
    """Splice the report into `document` at character offset `position`."""
    report = assemble_report(sources, config, display, **kwargs)
    position = max(0, min(position, len(document)))
    return document[:position] + report.text + document[position:], report


@handle_config_errors
async def invoice_report(
    sources: list[dict],
    params: Optional[dict] = None,
    block_params: Optional[str] = None,
    range_text: Optional[str] = None,
    document: Optional[str] = None,
    position: Optional[int] = None,
) -> dict:
    """
    Build a billing table from clocked time.

    Args:
        sources: One dict per document:
            {"name": "client.org", "total_minutes": 95,
             "entries": [{"level": 1, "headline": "Task", "minutes": 95,
                          "properties": {"Effort": "1:30", "Comment": "..."}}]}
        params: Options: rate, accuracy, time_display ('hours'|'duration'),
            emphasize, properties (['Effort', 'Comment']), formula, header,
            lang, block, wstart, mstart
        block_params: Same options as an org parameter line,
            e.g. ':rate 95 :properties ("Effort")'. Merged under params.
        range_text: Date range description for the caption, e.g. 'week 42'
        document: Optional text to insert the report into
        position: Character offset in document (default: end)

    Returns:
        Dict with text (or document), align=True, recalculate (True when a
        formula was appended) and row count. Invalid formula returns an
        invalid_config error without any text.
    """
    options = parse_block_params(block_params) if block_params else {}
    options.update(params or {})
    config = InvoiceConfig.from_mapping(options)

    kwargs = {
        "default_rate": get_default_rate(),
        "default_accuracy": get_default_accuracy(),
        "range_text": range_text,
    }
    raw_sources = parse_sources(sources)

    if document is not None:
        at = len(document) if position is None else position
        text, report = insert_report(document, at, raw_sources, config, display_state, **kwargs)
        result = {"document": text}
    else:
        report = assemble_report(raw_sources, config, display_state, **kwargs)
        result = {"text": report.text}

    logger.info(f"Invoice report built: {report.row_count} rows from {len(raw_sources)} sources")
    return {
        **result,
        "align": report.align,
        "recalculate": report.recalculate,
        "rows": report.row_count,
    }
