"""Invoice tools package.

Billing reports from outline time-tracking data: billable hours, cost per
task, per-source and grand totals.
"""

from clock_invoice.tools.invoice.report import invoice_report
from clock_invoice.tools.invoice.display import invoice_toggle_time_display
from clock_invoice.tools.invoice.settings import invoice_config

__all__ = [
    "invoice_report",
    "invoice_toggle_time_display",
    "invoice_config",
]
