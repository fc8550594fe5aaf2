"""
Clock Invoice MCP Server.

FastMCP server exposing invoice tools over stdio.

Tools (3 total):
- invoice_report: Billing table from clocked time
- invoice_toggle_time_display: Switch between billable hours and h:mm
- invoice_config: Global rate, accuracy and display defaults
"""

from fastmcp import FastMCP

from clock_invoice.tools.invoice import (
    invoice_report,
    invoice_toggle_time_display,
    invoice_config,
)
from clock_invoice.tools.invoice.display import display_state
from clock_invoice.utils.config import get_time_display


# Create server
mcp = FastMCP(
    name="clock-invoice",
    instructions="""Invoices from outline time-tracking data.

TOOL SELECTION:
Report: invoice_report (sources = clocked tasks per document; params = rate, accuracy,
  time_display, emphasize, properties ["Effort", "Comment"], formula, header, lang)
  Or pass the org block line as block_params, e.g. ':rate 95 :properties ("Effort")'.
  Result: text (or document with the table inserted at position), align, recalculate.
Display: invoice_toggle_time_display (hours <-> duration), then regenerate the report.
Defaults: invoice_config (action="list"|"get"|"set"|"reset"; keys rate, accuracy, time_display)

Sources with no clocked time are skipped. Totals are computed per source from its total
minutes, so row amounts may differ from the subtotal in the last digit."""
)

mcp.tool()(invoice_report)
mcp.tool()(invoice_toggle_time_display)
mcp.tool()(invoice_config)


def serve():
    """Run MCP server."""
    display_state.set(get_time_display())
    mcp.run()


if __name__ == "__main__":
    serve()
