"""
Export strategies for roster data.

This module implements the Strategy Pattern for exporting shifts to
various formats. Each exporter encapsulates a specific output format.
"""

import csv
from abc import ABC, abstractmethod
from datetime import date

from .bulk import date_range
from .catalog import DEFAULT_CATALOG, TimeSlotCatalog
from .merge import build_shift_blocks, working_minutes
from .models import Employee, Roster


class ExportStrategy(ABC):
    """Abstract base class for roster export strategies.

    Subclasses implement specific export formats (CSV, Excel, etc.).
    Common helper methods for data transformation are provided here.
    """

    def __init__(
        self,
        roster: Roster,
        start: date,
        end: date,
        catalog: TimeSlotCatalog = DEFAULT_CATALOG,
    ):
        """Initialize the export strategy.

        Args:
            roster: The roster to export
            start: First date of the exported period
            end: Last date of the exported period (inclusive)
            catalog: Time slot catalog used to resolve slot-only shifts
        """
        if end < start:
            raise ValueError(f"End date {end} cannot be before start date {start}")
        self.roster = roster
        self.start = start
        self.end = end
        self.catalog = catalog

    @abstractmethod
    def export(self, filepath: str) -> None:
        """Export the roster to the specified file.

        Args:
            filepath: Path to the output file
        """
        pass

    def _get_date_range(self) -> list[date]:
        return date_range(self.start, self.end)

    def _sorted_employees(self) -> list[Employee]:
        """Active employees first, then by name."""
        return sorted(
            self.roster.employees, key=lambda emp: (not emp.is_active, emp.name)
        )


class SimpleCSVExporter(ExportStrategy):
    """Exports one row per shift block.

    Output format: Date, Employee, Start, End, Status, Notes
    """

    FIELDNAMES = ["Date", "Employee", "Start", "End", "Status", "Notes"]

    def export(self, filepath: str) -> None:
        """Export blocks to a CSV file.

        Args:
            filepath: Path to the output CSV file
        """
        rows: list[dict[str, str]] = []

        for day in self._get_date_range():
            for emp in self._sorted_employees():
                for block in build_shift_blocks(emp, day, self.catalog):
                    rows.append(
                        {
                            "Date": day.isoformat(),
                            "Employee": emp.name,
                            "Start": block.start_time,
                            "End": block.end_time,
                            "Status": block.status,
                            "Notes": block.notes or "",
                        }
                    )

        with open(filepath, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.FIELDNAMES)
            writer.writeheader()
            writer.writerows(rows)

        print(f"\n✓ Shifts exported to {filepath}")


class MatrixCSVExporter(ExportStrategy):
    """Exports worked hours as an employee x date matrix.

    Output format:
    - First column: Employee name
    - Subsequent columns: One per date, worked hours (blank for none)
    - TOTAL row with SUM formulas for each date column
    """

    def export(self, filepath: str) -> None:
        """Export the matrix to a CSV file.

        Args:
            filepath: Path to the output CSV file
        """
        dates = self._get_date_range()
        employees = self._sorted_employees()

        rows: list[list[str]] = [self._build_header_row(dates)]
        for emp in employees:
            row = [emp.name]
            for day in dates:
                minutes = working_minutes(emp, day, self.catalog)
                row.append(self._format_hours(minutes) if minutes else "")
            rows.append(row)

        # Row 1 is the header, employees occupy rows 2..len+1
        rows.append(self._build_total_row(len(dates), len(employees) + 1))

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerows(rows)

        print(f"\n✓ Shifts exported to {filepath} (matrix format)")

    def _build_header_row(self, dates: list[date]) -> list[str]:
        header = ["Employee"]
        for d in dates:
            header.append(f"{d.strftime('%Y-%m-%d')} {d.strftime('%a')}")
        return header

    def _build_total_row(self, num_date_cols: int, last_data_row: int) -> list[str]:
        """Build the TOTAL row with SUM formulas.

        Args:
            num_date_cols: Number of date columns
            last_data_row: The last employee row (1-indexed)

        Returns:
            List with "TOTAL" and a SUM formula for each column
        """
        total_row = ["TOTAL"]
        for col_idx in range(num_date_cols):
            col_letter = self._col_index_to_excel_letter(col_idx + 1)
            total_row.append(f"=SUM({col_letter}2:{col_letter}{last_data_row})")
        return total_row

    @staticmethod
    def _format_hours(minutes: int) -> str:
        hours = minutes / 60
        return f"{hours:g}"

    def _col_index_to_excel_letter(self, index: int) -> str:
        """Convert 0-based column index to Excel column letter.

        Args:
            index: 0-based column index

        Returns:
            Excel column letter (A, B, ..., Z, AA, AB, ...)
        """
        result = ""
        index += 1  # Convert to 1-based
        while index > 0:
            index -= 1
            result = chr(index % 26 + ord("A")) + result
            index //= 26
        return result
