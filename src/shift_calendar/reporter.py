"""
Reporting and output formatting for rosters.
"""

import pandas as pd
from datetime import date
from typing import Collection, List

from .bulk import BulkAssignmentResult, date_range
from .catalog import DEFAULT_CATALOG, TimeSlotCatalog
from .merge import build_shift_blocks, working_minutes
from .models import Roster


class RosterReporter:
    """Formats and displays a roster over a date range."""

    def __init__(
        self,
        roster: Roster,
        catalog: TimeSlotCatalog = DEFAULT_CATALOG,
        unsaved_shift_ids: Collection[str] = (),
    ):
        self.roster = roster
        self.catalog = catalog
        self.unsaved_shift_ids = unsaved_shift_ids

    def print_report(self, start: date, end: date, quiet: bool = False) -> None:
        """Print the complete roster report for [start, end]."""
        self._print_header(start, end)
        self._print_daily_schedule(start, end)

        if not quiet:
            self._print_employee_summary(start, end)
            self._print_day_crossing_series()

    def print_bulk_result(self, result: BulkAssignmentResult) -> None:
        """Print the outcome of a bulk assignment run."""
        self._print_title("BULK ASSIGNMENT")
        print(f"\n{result.summary}")
        for plan in result.plans:
            action = "skipped" if plan.will_skip else "assigned"
            print(
                f"  {plan.date.strftime('%Y-%m-%d (%a)')}: "
                f"{plan.duplicate_status:8s} -> {action}"
            )
        print()

    def _print_title(self, title: str) -> None:
        print("=" * 80)
        print(title)
        print("=" * 80)

    def _print_header(self, start: date, end: date) -> None:
        self._print_title("SHIFT CALENDAR")

        print(f"\nPeriod: {start} to {end}")
        print(
            f"Employees: {len(self.roster.employees)} "
            f"({len(self.roster.active_employees)} active)"
        )
        print(f"Time Grid: {self.catalog[0].start} to {self.catalog[-1].end}")
        if self.unsaved_shift_ids:
            print(f"Unsaved shifts: {len(self.unsaved_shift_ids)}")
        print()

    def _print_daily_schedule(self, start: date, end: date) -> None:
        """Print day-by-day blocks for every employee."""
        self._print_title("DAILY SCHEDULE")

        for day in date_range(start, end):
            lines = self._day_lines(day)
            if not lines:
                continue
            print(f"\n{day.strftime('%Y-%m-%d (%a)')}")
            for line in lines:
                print(line)
        print()

    def _day_lines(self, day: date) -> List[str]:
        lines = []
        for emp in self.roster.employees:
            for block in build_shift_blocks(emp, day, self.catalog):
                unsaved = any(
                    shift_id in self.unsaved_shift_ids for shift_id in block.shift_ids
                )
                marker = "*" if unsaved else " "
                notes = f"  {block.notes}" if block.notes else ""
                lines.append(
                    f"  {marker} {emp.name:12s} {block.start_time}-{block.end_time} "
                    f"{block.status:12s}{notes}"
                )
        return lines

    def _print_employee_summary(self, start: date, end: date) -> None:
        """Print employee shift summary table."""
        self._print_title("EMPLOYEE SUMMARY")

        days = date_range(start, end)
        data = []
        for emp in self.roster.employees:
            minutes_per_day = [working_minutes(emp, day, self.catalog) for day in days]
            data.append(
                {
                    "Employee": emp.name,
                    "Position": emp.position,
                    "Status": emp.status,
                    "Shifts": sum(1 for shift in emp.shifts if start <= shift.date <= end),
                    "Days Worked": sum(1 for minutes in minutes_per_day if minutes > 0),
                    "Hours": sum(minutes_per_day) / 60,
                }
            )

        if not data:
            print("\n  No employees")
            print()
            return

        df = pd.DataFrame(data).set_index("Employee")
        pd.options.display.float_format = "{:.2f}".format
        print(df.to_string())
        print()

    def _print_day_crossing_series(self) -> None:
        """Print multi-day shifts."""
        self._print_title("DAY-CROSSING SHIFTS")

        if not self.roster.series:
            print("\n  No day-crossing shifts")
            print()
            return

        for series in self.roster.series.values():
            employee = self.roster.find_employee(series.employee_id)
            name = employee.name if employee else series.employee_id
            notes = f" - {series.base_notes}" if series.base_notes else ""
            print(
                f"\n  {name}: {series.dates[0].strftime('%Y-%m-%d')} {series.start_time} to "
                f"{series.dates[-1].strftime('%Y-%m-%d')} {series.end_time} "
                f"({series.day_count} days){notes}"
            )
        print()
