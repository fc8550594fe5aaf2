"""
Tests for invoice report assembly.
"""

import io

import pytest

from clock_invoice.tools.invoice.display import DisplayModeState, TimeDisplay
from clock_invoice.tools.invoice.options import InvoiceConfigError
from clock_invoice.tools.invoice.report import (
    assemble_report,
    insert_report,
    make_caption,
    write_report,
)
from clock_invoice.tools.invoice.options import InvoiceConfig

from tests.conftest import CAPTION, FIXED_NOW


def build(sources, params=None, display=None, **kwargs):
    kwargs.setdefault("default_rate", 80.0)
    kwargs.setdefault("default_accuracy", 3)
    kwargs.setdefault("now", FIXED_NOW)
    return assemble_report(sources, params, display, **kwargs)


class TestBasicReport:

    def test_single_source(self, client_source):
        report = build([client_source])

        assert report.lines == [
            CAPTION,
            "| Task | Time | Billable |",
            "|-",
            "| Client A | 1.583 | $126.64 |",
            "| - Review | 0.500 | $40.00 |",
            "|-",
            "| Totals | 1.583 | $126.64 |",
        ]
        assert report.align is True
        assert report.recalculate is False
        assert report.row_count == 2

    def test_grand_totals_across_sources(self, client_source, empty_source, second_source):
        report = build([client_source, empty_source, second_source])

        assert "| Client B | 0.750 | $60.00 |" in report.lines
        assert not any("Nothing clocked" in line for line in report.lines)
        assert report.lines[-1] == "| Totals | 2.333 | $186.64 |"
        assert report.lines.count("|-") == 3

    def test_deeper_levels_indent(self):
        source = {
            "total_minutes": 60,
            "entries": [
                {"level": 1, "headline": "Top", "minutes": 60},
                {"level": 3, "headline": "Deep", "minutes": 60},
            ],
        }
        assert "| -- Deep | 1.000 | $80.00 |" in build([source]).lines

    def test_text_ends_with_newline(self, client_source):
        assert build([client_source]).text.endswith("$126.64 |\n")


class TestEmptyReport:

    def test_all_sources_without_time(self, empty_source):
        report = build([empty_source, {"total_minutes": None, "entries": []}])

        assert report.lines == [CAPTION, "| Task | Time | Billable |"]
        assert report.row_count == 0

    def test_no_sources(self):
        assert len(build([]).lines) == 2

    def test_formula_still_emitted(self):
        report = build([], {"formula": "$3=vsum(@2..@-1)"})
        assert report.lines[-1] == "#+TBLFM: $3=vsum(@2..@-1)"
        assert report.recalculate


class TestOptions:

    def test_rate_override(self, client_source):
        assert build([client_source], {"rate": 100}).lines[3] == "| Client A | 1.583 | $158.30 |"

    def test_invalid_rate_uses_default(self, client_source):
        assert build([client_source], {"rate": "abc"}).lines[3] == "| Client A | 1.583 | $126.64 |"

    def test_invalid_rate_and_default_bill_zero(self, client_source):
        report = build([client_source], {"rate": "abc"}, default_rate="n/a")
        assert report.lines[3] == "| Client A | 1.583 | $0.00 |"

    def test_accuracy(self, client_source):
        report = build([client_source], {"accuracy": 1})
        assert report.lines[3] == "| Client A | 1.6 | $128.00 |"

    def test_default_accuracy(self, client_source):
        report = build([client_source], default_accuracy=2)
        assert report.lines[3] == "| Client A | 1.58 | $126.40 |"

    def test_emphasize(self, client_source):
        report = build([client_source], {"emphasize": True})

        assert report.lines[3] == "| *Client A* | *1.583* | *$126.64* |"
        assert report.lines[4] == "| - Review | 0.500 | $40.00 |"
        assert report.lines[-1] == "| *Totals* | *1.583* | *$126.64* |"

    def test_effort_and_comment_columns(self, client_source):
        report = build([client_source], {"properties": ["Effort", "Comment"]})

        assert report.lines[1] == "| Task | Est | Time | Billable | Comment |"
        assert report.lines[3] == "| Client A | *1.500* | 1.583 | $126.64 | Kickoff call |"
        assert report.lines[4] == "| - Review |  | 0.500 | $40.00 |  |"
        assert report.lines[-1] == "| Totals |  | 1.583 | $126.64 |  |"

    def test_unreadable_effort_left_blank(self):
        source = {"total_minutes": 60, "entries": [
            {"level": 1, "headline": "Task", "minutes": 60, "properties": {"Effort": "a while"}},
        ]}
        report = build([source], {"properties": ["Effort"]})
        assert report.lines[3] == "| Task |  | 1.000 | $80.00 |"

    def test_pipe_in_cell_text_escaped(self):
        source = {"total_minutes": 60, "entries": [
            {"level": 1, "headline": "Design | build", "minutes": 60, "properties": {"Comment": "a|b"}},
        ]}
        report = build([source], {"properties": ["Comment"]})
        assert report.lines[3] == "| Design \\vert{} build | 1.000 | $80.00 | a\\vert{}b |"

    def test_unconfigured_properties_ignored(self, client_source):
        report = build([client_source])
        assert not any("Kickoff call" in line for line in report.lines)

    def test_formula(self, client_source):
        report = build([client_source], {"formula": "@>$3=vsum(@I..@II)"})

        assert report.lines[-1] == "#+TBLFM: @>$3=vsum(@I..@II)"
        assert report.lines[-2].startswith("| Totals")
        assert report.recalculate

    def test_non_string_formula_fails(self, client_source):
        with pytest.raises(InvoiceConfigError):
            build([client_source], {"formula": 42})


class TestCaption:

    def test_custom_header(self, client_source):
        report = build([client_source], {"header": "#+NAME: invoice-october\n"})
        assert report.lines[0] == "#+NAME: invoice-october"

    def test_range_text(self):
        caption = make_caption(InvoiceConfig(), FIXED_NOW, "week 42")
        assert caption == CAPTION + ", for week 42."

    def test_translated(self):
        caption = make_caption(InvoiceConfig(lang="de"), FIXED_NOW)
        assert caption == "#+CAPTION: Erstellt am [2026-10-18 Sun 14:05]"

    def test_unknown_language_falls_back(self):
        assert make_caption(InvoiceConfig(lang="xx"), FIXED_NOW) == CAPTION


class TestDisplayMode:

    def test_duration_mode(self, client_source, second_source):
        report = build([client_source, second_source], {"properties": ["Effort"]}, TimeDisplay.DURATION)

        assert report.lines[3] == "| Client A | *1:30* | 1:35 | $126.64 |"
        assert report.lines[-1] == "| Totals |  | 2:20 | $186.64 |"

    def test_state_is_read(self, client_source):
        state = DisplayModeState(TimeDisplay.DURATION)
        assert build([client_source], display=state).lines[3] == "| Client A | 1:35 | $126.64 |"
        assert state.mode is TimeDisplay.DURATION

    def test_option_overrides_state(self, client_source):
        state = DisplayModeState(TimeDisplay.DURATION)
        report = build([client_source], {"time_display": "hours"}, state)
        assert report.lines[3] == "| Client A | 1.583 | $126.64 |"

    def test_toggle_twice_same_report(self, client_source):
        state = DisplayModeState()
        before = build([client_source], display=state).lines
        state.toggle()
        assert build([client_source], display=state).lines != before
        state.toggle()
        assert build([client_source], display=state).lines == before

    def test_huge_duration(self):
        source = {"total_minutes": 10**30, "entries": [{"level": 1, "headline": "Long", "minutes": 10**30}]}
        report = build([source], display=TimeDisplay.DURATION)
        assert report.lines[3].startswith(f"| Long | {10**30 // 60}:")


class TestOutput:

    def test_write_report(self, client_source):
        out = io.StringIO()
        report = write_report(out, [client_source], {}, None, default_rate=80.0, now=FIXED_NOW)
        assert out.getvalue() == report.text

    def test_nothing_written_on_config_error(self, client_source):
        out = io.StringIO()
        with pytest.raises(InvoiceConfigError):
            write_report(out, [client_source], {"formula": 42}, now=FIXED_NOW)
        assert out.getvalue() == ""

    def test_insert_report(self, client_source):
        document = "* Invoice\n\n* Notes\n"
        updated, report = insert_report(document, 11, [client_source], {}, default_rate=80.0, now=FIXED_NOW)
        assert updated == "* Invoice\n\n" + report.text + "* Notes\n"

    def test_insert_position_clamped(self, client_source):
        updated, report = insert_report("x", 99, [client_source], {}, now=FIXED_NOW)
        assert updated == "x" + report.text
