"""
Invoice CLI commands.

Build reports from exported clock data, toggle the time display and manage
global defaults.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from clock_invoice.tools.invoice.display import DisplayModeState
from clock_invoice.tools.invoice.options import InvoiceConfigError, parse_block_params
from clock_invoice.tools.invoice.report import assemble_report
from clock_invoice.tools.invoice.settings import VALID_SETTINGS, invoice_config
from clock_invoice.utils.config import (
    get_default_accuracy,
    get_default_rate,
    get_time_display,
    set_time_display,
)
from clock_invoice.utils.table import align_table


logger = logging.getLogger(__name__)


def _load_sources(path: str) -> list:
    """Read sources from a JSON file ('-' for stdin): a list, or {"sources": [...]}."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    data = json.loads(text)
    if isinstance(data, dict):
        data = data.get("sources", [])
    if not isinstance(data, list):
        raise ValueError("Expected a list of sources")
    return data


def _parse_assignment(assignment: str) -> tuple[str, object]:
    """KEY=VALUE, with VALUE read as JSON when possible (numbers, lists)."""
    if "=" not in assignment:
        raise ValueError(f"Expected KEY=VALUE, got '{assignment}'")
    key, raw = assignment.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key.strip(), value


def run_report(
    sources_path: str,
    params: Optional[str] = None,
    assignments: Optional[list[str]] = None,
    range_text: Optional[str] = None,
    output: Optional[str] = None,
    align: bool = True,
) -> int:
    """
    Print (or write) an invoice report.

    Returns exit code (0 = success, 1 = error).
    """
    try:
        sources = _load_sources(sources_path)
        options = parse_block_params(params) if params else {}
        for assignment in assignments or []:
            key, value = _parse_assignment(assignment)
            options[key] = value
        report = assemble_report(
            sources,
            options,
            DisplayModeState(get_time_display()),
            default_rate=get_default_rate(),
            default_accuracy=get_default_accuracy(),
            range_text=range_text,
        )
    except InvoiceConfigError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"✗ Cannot read sources: {e}", file=sys.stderr)
        return 1

    lines = align_table(report.lines) if align and report.align else report.lines
    text = "\n".join(lines) + "\n"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"✓ Report written to {output} ({report.row_count} rows)")
    else:
        sys.stdout.write(text)

    if report.recalculate:
        logger.info("Report contains a formula line; recalculate it in your editor")
    return 0


def run_toggle() -> int:
    """Flip the persisted time display mode."""
    state = DisplayModeState(get_time_display())
    mode = state.toggle()
    set_time_display(mode.value)
    print(f"✓ Time display: {mode.value}")
    return 0


def run_config_command(args: list[str]) -> int:
    """
    Handle config CLI commands.

    Usage:
        clock-invoice config list
        clock-invoice config get KEY
        clock-invoice config set KEY VALUE
        clock-invoice config reset KEY

    Returns exit code (0 = success, 1 = error).
    """
    if not args:
        _print_config_usage()
        return 1

    action = args[0].lower()
    key = args[1] if len(args) > 1 else None
    value = args[2] if len(args) > 2 else None

    result = asyncio.run(invoice_config(action, key=key, value=value))

    if "error" in result:
        print(f"✗ {result['error']}")
        return 1

    if action == "list":
        for name, current in result["settings"].items():
            stored = result["stored"].get(name)
            origin = "config" if stored is not None else "default"
            print(f"{name} = {current}  ({origin})")
        return 0

    if action == "set":
        print(f"✓ {result['key']} = {result['value']}")
    elif action == "reset":
        print(f"✓ {result['key']} reset, now {result['value']}")
    else:
        print(f"{result['key']} = {result['value']}")
    return 0


def _print_config_usage():
    """Print config usage."""
    print("Usage: clock-invoice config <action> [KEY] [VALUE]")
    print()
    print("Actions: list, get, set, reset")
    print()
    print("Keys:")
    for name, description in VALID_SETTINGS.items():
        print(f"  {name:<13} {description}")
