"""
Clock invoice CLI entry point.

Usage:
    python -m clock_invoice report clocks.json                 # Print invoice table
    python -m clock_invoice report clocks.json --params ':rate 95 :emphasize t'
    python -m clock_invoice report clocks.json --set rate=95 --output invoice.org
    python -m clock_invoice toggle                             # Switch hours/duration display
    python -m clock_invoice config list                        # Show global defaults
    python -m clock_invoice config set rate 95                 # Change default rate
    python -m clock_invoice serve                              # Run MCP server
"""

import argparse
import logging
import sys


def main():
    parser = argparse.ArgumentParser(
        prog="clock-invoice",
        description="Billing reports from outline time-tracking data"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # report command
    report_parser = subparsers.add_parser("report", help="Build an invoice table")
    report_parser.add_argument(
        "sources",
        help="JSON file with clocked sources ('-' for stdin)"
    )
    report_parser.add_argument(
        "--params", "-p",
        help="Org-style options, e.g. ':rate 95 :properties (\"Effort\" \"Comment\")'"
    )
    report_parser.add_argument(
        "--set", "-s",
        action="append",
        dest="assignments",
        metavar="KEY=VALUE",
        help="Single option (repeatable), e.g. rate=95 or accuracy=2"
    )
    report_parser.add_argument(
        "--range",
        dest="range_text",
        help="Date range description for the caption"
    )
    report_parser.add_argument(
        "--output", "-o",
        help="Write report to file instead of stdout"
    )
    report_parser.add_argument(
        "--no-align",
        action="store_true",
        dest="no_align",
        help="Leave table columns unaligned"
    )

    # toggle command
    subparsers.add_parser("toggle", help="Switch time display between hours and duration")

    # config command
    config_parser = subparsers.add_parser("config", help="Manage global defaults")
    config_parser.add_argument(
        "action",
        nargs="?",
        choices=["list", "get", "set", "reset"],
        help="Config action"
    )
    config_parser.add_argument("key", nargs="?", help="Setting key")
    config_parser.add_argument("value", nargs="?", help="Setting value")

    # serve command
    subparsers.add_parser("serve", help="Run MCP server")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "report":
        from clock_invoice.cli.invoice import run_report
        sys.exit(run_report(
            sources_path=args.sources,
            params=args.params,
            assignments=args.assignments,
            range_text=args.range_text,
            output=args.output,
            align=not args.no_align,
        ))

    elif args.command == "toggle":
        from clock_invoice.cli.invoice import run_toggle
        sys.exit(run_toggle())

    elif args.command == "config":
        from clock_invoice.cli.invoice import run_config_command
        subargs = [a for a in (args.action, args.key, args.value) if a is not None]
        sys.exit(run_config_command(subargs))

    elif args.command in ("serve", None):
        from clock_invoice.server import serve
        serve()

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
