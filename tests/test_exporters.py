"""Tests for roster export strategies."""

import csv
import pytest
from datetime import date

from shift_calendar.exporters import (
    ExportStrategy,
    MatrixCSVExporter,
    SimpleCSVExporter,
)
from shift_calendar.models import Employee, EmployeeShift, Roster

MONDAY = date(2025, 3, 10)
TUESDAY = date(2025, 3, 11)


class TestExportStrategyBase:
    """Tests for the ExportStrategy abstract base class."""

    def test_cannot_instantiate_abstract_class(self, roster: Roster):
        """ExportStrategy cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ExportStrategy(roster, MONDAY, TUESDAY)

    def test_end_before_start_raises_error(self, roster: Roster):
        with pytest.raises(ValueError, match="cannot be before start date"):
            SimpleCSVExporter(roster, TUESDAY, MONDAY)

    def test_get_date_range(self, roster: Roster):
        """_get_date_range includes both ends."""
        exporter = SimpleCSVExporter(roster, MONDAY, date(2025, 3, 16))
        dates = exporter._get_date_range()

        assert len(dates) == 7
        assert dates[0] == MONDAY
        assert dates[-1] == date(2025, 3, 16)

    def test_active_employees_first(self, roster: Roster):
        roster.employees.append(Employee(id="e3", name="Abe", status="inactive"))
        exporter = SimpleCSVExporter(roster, MONDAY, MONDAY)

        assert [emp.name for emp in exporter._sorted_employees()] == ["Sato", "Yamada", "Abe"]


class TestSimpleCSVExporter:
    """Tests for the one-row-per-block CSV export."""

    def test_export_has_correct_headers(self, roster: Roster, tmp_path):
        filepath = tmp_path / "shifts.csv"
        SimpleCSVExporter(roster, MONDAY, TUESDAY).export(str(filepath))

        with open(filepath) as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == SimpleCSVExporter.FIELDNAMES

    def test_one_row_per_block(self, roster: Roster, yamada: Employee, tmp_path):
        """Touching slot shifts are exported as one block."""
        yamada.shifts.append(
            EmployeeShift(id="s-noon", employee_id="emp-yamada", date=MONDAY, time_slot="12:00")
        )
        filepath = tmp_path / "shifts.csv"
        SimpleCSVExporter(roster, MONDAY, TUESDAY).export(str(filepath))

        with open(filepath) as f:
            rows = list(csv.DictReader(f))

        assert rows == [
            {
                "Date": "2025-03-10",
                "Employee": "Yamada",
                "Start": "09:00",
                "End": "13:00",
                "Status": "working",
                "Notes": "Morning move",
            }
        ]

    def test_export_prints_confirmation(self, roster: Roster, tmp_path, capsys):
        filepath = tmp_path / "shifts.csv"
        SimpleCSVExporter(roster, MONDAY, MONDAY).export(str(filepath))
        assert "Shifts exported to" in capsys.readouterr().out


class TestMatrixCSVExporter:
    """Tests for the employee x date hours matrix."""

    @pytest.fixture
    def rows(self, roster: Roster, tmp_path) -> list[list[str]]:
        filepath = tmp_path / "matrix.csv"
        MatrixCSVExporter(roster, MONDAY, TUESDAY).export(str(filepath))
        with open(filepath) as f:
            return list(csv.reader(f))

    def test_header_row_structure(self, rows: list[list[str]]):
        assert rows[0] == ["Employee", "2025-03-10 Mon", "2025-03-11 Tue"]

    def test_hours_per_cell(self, rows: list[list[str]]):
        """Blank cells for no work, hours otherwise."""
        assert rows[1] == ["Sato", "", ""]
        assert rows[2] == ["Yamada", "3", ""]

    def test_total_row_present(self, rows: list[list[str]]):
        assert rows[-1] == ["TOTAL", "=SUM(B2:B3)", "=SUM(C2:C3)"]

    def test_fractional_hours(self):
        assert MatrixCSVExporter._format_hours(90) == "1.5"

    @pytest.mark.parametrize("index,letter", [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB")])
    def test_col_index_to_excel_letter(self, roster: Roster, index: int, letter: str):
        exporter = MatrixCSVExporter(roster, MONDAY, MONDAY)
        assert exporter._col_index_to_excel_letter(index) == letter
