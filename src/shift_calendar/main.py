"""
Main entry point for the shift calendar CLI.
"""

import sys
import argparse
import logging
from datetime import date

from .bulk import BulkAssigner, BulkAssignmentRequest, date_range, dates_for_template
from .config import (
    ConfigLoader,
    ConfigurationError,
    InvalidDateFormatError,
    InvalidTimeFormatError,
)
from .exporters import MatrixCSVExporter, SimpleCSVExporter
from .reporter import RosterReporter
from .store import InMemoryShiftStore


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}', use ISO 8601 (YYYY-MM-DD)"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shift-calendar",
        description="Inspect a shift roster and bulk-assign shifts to it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report on every shift in the roster
  shift-calendar config/roster.yaml

  # Assign 09:00-17:00 to one employee on three dates
  shift-calendar config/roster.yaml --employee emp-yamada \\
      --dates 2025-03-10 2025-03-11 2025-03-12

  # Apply a template to every matching weekday in March
  shift-calendar config/roster.yaml --template tpl-day \\
      --from 2025-03-01 --to 2025-03-31 --export-csv march.csv
        """,
    )

    parser.add_argument("config", type=str, help="Path to YAML roster file")
    parser.add_argument("--employee", type=str, help="Employee id to assign shifts to")
    parser.add_argument("--template", type=str, help="Template id to copy times from")
    parser.add_argument("--start", type=str, default="09:00", help="Start time (HH:MM)")
    parser.add_argument("--end", type=str, default="17:00", help="End time (HH:MM)")
    parser.add_argument("--notes", type=str, default="", help="Notes for new shifts")
    parser.add_argument(
        "--dates", type=_iso_date, nargs="+", default=[], help="Target dates"
    )
    parser.add_argument("--from", dest="date_from", type=_iso_date, help="Range start")
    parser.add_argument("--to", dest="date_to", type=_iso_date, help="Range end")
    parser.add_argument("--export-csv", type=str, help="Export shifts to CSV file")
    parser.add_argument(
        "--matrix", action="store_true", help="Export as employee x date hours matrix"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress detailed output (only show daily schedule)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def _target_dates(args, template) -> list[date]:
    dates = list(args.dates)
    if args.date_from and args.date_to:
        if template is not None:
            dates.extend(dates_for_template(template, args.date_from, args.date_to))
        else:
            dates.extend(date_range(args.date_from, args.date_to))
    return dates


def _report_period(roster, args, assigned: list[date]) -> tuple[date, date]:
    candidates = list(assigned)
    if args.date_from and args.date_to:
        candidates.extend([args.date_from, args.date_to])
    if not candidates:
        candidates = [shift.date for emp in roster.employees for shift in emp.shifts]
    if not candidates:
        today = date.today()
        return today, today
    return min(candidates), max(candidates)


def main():
    """Main entry point for the CLI."""
    args = build_parser().parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        print(f"Loading roster from: {args.config}")
        loader = ConfigLoader(args.config)
        roster = loader.load()
        catalog = loader.catalog

        print("✓ Roster loaded successfully")
        print(loader.get_summary())
        print()

        store = InMemoryShiftStore(roster)
        reporter = RosterReporter(roster, catalog, store.unsaved_shift_ids)
        dates: list[date] = []

        if args.employee or args.template:
            template = roster.get_template(args.template) if args.template else None
            dates = _target_dates(args, template)
            if not dates:
                print("Error: no target dates given (use --dates or --from/--to)",
                      file=sys.stderr)
                sys.exit(1)

            if template is not None:
                request = BulkAssignmentRequest.from_template(template, dates)
                if args.employee:
                    request.employee_id = args.employee
            else:
                request = BulkAssignmentRequest(
                    employee_id=args.employee,
                    dates=dates,
                    start_time=args.start,
                    end_time=args.end,
                    notes=args.notes,
                )
            roster.get_employee(request.employee_id)

            assigner = BulkAssigner(
                roster, store.add_shift, store.delete_multiple_shifts, catalog
            )
            reporter.print_bulk_result(assigner.assign(request))

        start, end = _report_period(roster, args, dates)
        reporter.print_report(start, end, args.quiet)

        if args.export_csv:
            exporter_cls = MatrixCSVExporter if args.matrix else SimpleCSVExporter
            exporter_cls(roster, start, end, catalog).export(args.export_csv)

        sys.exit(0)

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except InvalidDateFormatError as e:
        print(f"Date Format Error: {e}", file=sys.stderr)
        print(
            "\n Tip: Use ISO 8601 format (YYYY-MM-DD) for all dates.", file=sys.stderr
        )
        print("   Example: 2025-03-10", file=sys.stderr)
        sys.exit(1)

    except InvalidTimeFormatError as e:
        print(f"Time Format Error: {e}", file=sys.stderr)
        print('\n Tip: Quote times in YAML, e.g. start_time: "09:00"', file=sys.stderr)
        sys.exit(1)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        sys.exit(1)

    except ValueError as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"Unexpected Error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
