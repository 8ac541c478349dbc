"""
Configuration loader for parsing YAML roster files.
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, List
from datetime import date

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, format_minutes
from .models import (
    EMPLOYEE_STATUSES,
    SHIFT_STATUSES,
    WEEKDAYS,
    Employee,
    EmployeeShift,
    Roster,
    ShiftTemplate,
    TimeSlot,
    is_time_string,
)
from .store import generate_shift_id

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Custom exception for configuration errors."""

    pass


class InvalidDateFormatError(ConfigurationError):
    """Raised when a date is not in ISO 8601 format (YYYY-MM-DD)."""

    pass


class InvalidTimeFormatError(ConfigurationError):
    """Raised when a time is not in HH:MM format."""

    pass


class ConfigLoader:
    """Loads and validates a roster (time slots, employees, templates) from YAML."""

    def __init__(self, config_path: str | Path):
        """
        Initialize the ConfigLoader with a configuration file path.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        self.config_path = Path(config_path)

        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        self._raw_config: Dict[str, Any] | None = None
        self._roster: Roster | None = None
        self._catalog: TimeSlotCatalog | None = None

    def load(self) -> Roster:
        """
        Load and parse the configuration file.

        Returns:
            Roster with all employees, their shifts and the templates

        Raises:
            InvalidDateFormatError: If dates are not in ISO 8601 format
            InvalidTimeFormatError: If times are not in HH:MM format
            ConfigurationError: If configuration is invalid
        """
        with open(self.config_path, "r") as f:
            self._raw_config = yaml.safe_load(f) or {}

        if not isinstance(self._raw_config, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(self._raw_config).__name__}"
            )

        self._catalog = self._parse_time_slots(self._raw_config.get("time_slots"))
        self._roster = self._parse_roster()

        self._validate()

        return self._roster

    @property
    def roster(self) -> Roster:
        """
        Get the loaded roster.

        Raises:
            RuntimeError: If load() hasn't been called yet
        """
        if self._roster is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._roster

    @property
    def catalog(self) -> TimeSlotCatalog:
        """
        Get the time slot catalog, built once per load().

        Raises:
            RuntimeError: If load() hasn't been called yet
        """
        if self._catalog is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._catalog

    @property
    def raw_config(self) -> Dict[str, Any]:
        if self._raw_config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._raw_config

    def _parse_time(self, value: Any, context: str) -> str:
        """Parse an HH:MM value.

        YAML 1.1 reads unquoted 17:00 as the base-60 integer 1020, so
        integers are turned back into HH:MM.
        """
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 1440:
            value = format_minutes(value)

        if not is_time_string(value):
            raise InvalidTimeFormatError(
                f"{context} must be in HH:MM format, got: {value!r}. "
                f'Example: "09:00" (quote times in YAML)'
            )
        return value

    def _parse_date(self, value: Any, context: str) -> date:
        if not isinstance(value, date):
            raise InvalidDateFormatError(
                f"{context} must be in ISO 8601 format (YYYY-MM-DD), got: {value}. "
                f"Example: 2025-03-10"
            )
        return value

    def _parse_time_slots(self, slots_raw: List[Dict[str, Any]] | None) -> TimeSlotCatalog:
        """Parse the time slot grid, or fall back to the default hourly grid."""
        if not slots_raw:
            return DEFAULT_CATALOG

        slots = []
        for slot_data in slots_raw:
            start = self._parse_time(slot_data.get("start"), "Time slot start")
            end = self._parse_time(slot_data.get("end"), "Time slot end")
            slot_id = self._parse_time_slot_id(slot_data.get("id", start))
            label = slot_data.get("label", f"{start}-{end}")
            try:
                slots.append(TimeSlot(id=slot_id, label=label, start=start, end=end))
            except ValueError as e:
                raise ConfigurationError(str(e)) from e

        try:
            return TimeSlotCatalog(slots)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _parse_roster(self) -> Roster:
        raw = self._raw_config
        employees = self._parse_employees(raw.get("employees", []))
        templates = self._parse_templates(raw.get("templates", []))
        return Roster(employees=employees, templates=templates)

    def _parse_employees(self, employees_raw: List[Dict[str, Any]]) -> List[Employee]:
        """Parse employees and their shifts from raw config."""
        employees = []

        for emp_data in employees_raw:
            emp_id = emp_data.get("id")
            name = emp_data.get("name")
            if not emp_id or not name:
                raise ConfigurationError(
                    f"Every employee needs an id and a name, got: {emp_data}"
                )
            emp_id = str(emp_id)

            status = emp_data.get("status", "active")
            if status not in EMPLOYEE_STATUSES:
                raise ConfigurationError(
                    f"Employee '{name}' has invalid status '{status}'. "
                    f"Valid statuses: {', '.join(EMPLOYEE_STATUSES)}"
                )

            employees.append(
                Employee(
                    id=emp_id,
                    name=name,
                    position=emp_data.get("position", ""),
                    status=status,
                    shifts=self._parse_shifts(emp_data.get("shifts", []), emp_id, name),
                )
            )

        return employees

    def _parse_shifts(
        self, shifts_raw: List[Dict[str, Any]], employee_id: str, employee_name: str
    ) -> List[EmployeeShift]:
        """Parse the shifts of one employee."""
        shifts = []

        for shift_data in shifts_raw:
            context = f"Shift of {employee_name}"
            shift_date = self._parse_date(shift_data.get("date"), f"{context} date")

            status = shift_data.get("status", "working")
            if status not in SHIFT_STATUSES:
                raise ConfigurationError(
                    f"{context} on {shift_date} has invalid status '{status}'. "
                    f"Valid statuses: {', '.join(SHIFT_STATUSES)}"
                )

            start_time = shift_data.get("start_time")
            end_time = shift_data.get("end_time")
            time_slot = shift_data.get("time_slot")

            shifts.append(
                EmployeeShift(
                    id=str(shift_data.get("id") or generate_shift_id()),
                    employee_id=employee_id,
                    date=shift_date,
                    status=status,
                    start_time=(
                        self._parse_time(start_time, f"{context} start_time")
                        if start_time is not None
                        else None
                    ),
                    end_time=(
                        self._parse_time(end_time, f"{context} end_time")
                        if end_time is not None
                        else None
                    ),
                    time_slot=(
                        self._parse_time_slot_id(time_slot)
                        if time_slot is not None
                        else None
                    ),
                    customer_name=shift_data.get("customer_name"),
                    notes=shift_data.get("notes"),
                )
            )

        return shifts

    def _parse_time_slot_id(self, value: Any) -> str:
        # Slot ids look like times in the default grid and suffer the same
        # base-60 reading
        if isinstance(value, int) and not isinstance(value, bool):
            return format_minutes(value)
        return str(value)

    def _parse_templates(self, templates_raw: List[Dict[str, Any]]) -> List[ShiftTemplate]:
        """Parse shift templates from raw config."""
        templates = []

        for tpl_data in templates_raw:
            if not tpl_data.get("id") or not tpl_data.get("employee_id"):
                raise ConfigurationError(
                    f"Every template needs an id and an employee_id, got: {tpl_data}"
                )
            name = tpl_data.get("name", tpl_data.get("id"))
            weekdays = [str(day).lower()[:3] for day in tpl_data.get("weekdays", [])]
            unknown = [day for day in weekdays if day not in WEEKDAYS]
            if unknown:
                raise ConfigurationError(
                    f"Template '{name}' has invalid weekday(s): {', '.join(unknown)}. "
                    f"Valid names: {', '.join(WEEKDAYS)}"
                )

            templates.append(
                ShiftTemplate(
                    id=str(tpl_data.get("id")),
                    name=name,
                    employee_id=str(tpl_data.get("employee_id")),
                    start_time=self._parse_time(
                        tpl_data.get("start_time"), f"Template '{name}' start_time"
                    ),
                    end_time=self._parse_time(
                        tpl_data.get("end_time"), f"Template '{name}' end_time"
                    ),
                    weekdays=weekdays,
                    notes=tpl_data.get("notes"),
                )
            )

        return templates

    def _validate(self) -> None:
        """
        Validate that the roster is internally consistent.

        Raises:
            ConfigurationError: If the roster has issues
        """
        roster = self._roster

        seen = set()
        for emp in roster.employees:
            if emp.id in seen:
                raise ConfigurationError(f"Duplicate employee id '{emp.id}'")
            seen.add(emp.id)

        for template in roster.templates:
            if roster.find_employee(template.employee_id) is None:
                raise ConfigurationError(
                    f"Template '{template.name}' refers to undefined employee "
                    f"'{template.employee_id}'. Defined employees: {', '.join(seen)}"
                )
            if template.end_time <= template.start_time:
                raise ConfigurationError(
                    f"Template '{template.name}' must end after it starts "
                    f"({template.start_time} - {template.end_time})"
                )

        for emp in roster.employees:
            for shift in emp.shifts:
                if shift.time_slot and shift.time_slot not in self._catalog:
                    raise ConfigurationError(
                        f"Shift of {emp.name} on {shift.date} uses unknown time slot "
                        f"'{shift.time_slot}'"
                    )

        self._check_inactive_templates()

    def _check_inactive_templates(self) -> None:
        """Warn about templates that belong to inactive employees."""
        roster = self._roster

        for template in roster.templates:
            employee = roster.find_employee(template.employee_id)
            if employee is not None and not employee.is_active:
                logger.warning(
                    "Template '%s' belongs to inactive employee %s",
                    template.name,
                    employee.name,
                )

    def get_summary(self) -> str:
        """
        Get a summary of the loaded roster.

        Returns:
            Human-readable summary string

        Raises:
            RuntimeError: If load() hasn't been called yet
        """
        roster = self.roster
        catalog = self.catalog

        lines = [
            f"Configuration from: {self.config_path}",
            f"Time Slots: {len(catalog)} ({catalog[0].start} to {catalog[-1].end})",
            f"Employees: {len(roster.employees)} "
            f"({len(roster.active_employees)} active)",
        ]

        for emp in roster.employees:
            lines.append(f"  - {emp.name} ({emp.position or 'no position'}): "
                         f"{len(emp.shifts)} shifts")

        lines.append(f"Templates: {len(roster.templates)}")

        return "\n".join(lines)
