"""
Data models for the shift calendar.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

WORKING = "working"
UNAVAILABLE = "unavailable"
SHIFT_STATUSES = (WORKING, UNAVAILABLE)

ACTIVE = "active"
INACTIVE = "inactive"
EMPLOYEE_STATUSES = (ACTIVE, INACTIVE)

WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

_TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def is_time_string(value: object) -> bool:
    """Check if a value is an "HH:MM" string (00:00 through 24:00)."""
    if not isinstance(value, str) or not _TIME_PATTERN.match(value):
        return False
    hours, minutes = (int(part) for part in value.split(":"))
    if hours == 24:
        return minutes == 0
    return 0 <= hours < 24 and 0 <= minutes < 60


def _check_time(name: str, value: str) -> None:
    if not is_time_string(value):
        raise ValueError(f"{name} must be an HH:MM string, got {value!r}")


@dataclass(frozen=True)
class TimeSlot:
    """One bookable interval of the scheduling grid."""

    id: str
    label: str
    start: str
    end: str

    def __post_init__(self):
        _check_time("start", self.start)
        _check_time("end", self.end)
        if self.end <= self.start:
            raise ValueError(
                f"Time slot '{self.id}' must end after it starts "
                f"({self.start} - {self.end})"
            )


@dataclass
class EmployeeShift:
    """
    A block of time for one employee on one date.

    ``id`` is None until a store allocates one. ``employee_id`` is a lookup
    back-reference only; the owning ``Employee.shifts`` list is the source
    of truth.
    """

    employee_id: str
    date: date
    status: str = WORKING
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    time_slot: Optional[str] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[str] = None
    series_id: Optional[str] = None  # Day-crossing series, see Roster.series
    series_position: Optional[str] = None

    def __post_init__(self):
        if self.status not in SHIFT_STATUSES:
            raise ValueError(
                f"Shift status must be one of {', '.join(SHIFT_STATUSES)}, "
                f"got {self.status!r}"
            )
        if self.start_time:
            _check_time("start_time", self.start_time)
        if self.end_time:
            _check_time("end_time", self.end_time)

    @property
    def is_working(self) -> bool:
        return self.status == WORKING


@dataclass
class Employee:
    """An employee and the shifts they own."""

    id: str
    name: str
    position: str = ""
    status: str = ACTIVE
    shifts: List[EmployeeShift] = field(default_factory=list)

    def __post_init__(self):
        if self.status not in EMPLOYEE_STATUSES:
            raise ValueError(
                f"Employee status must be 'active' or 'inactive', got {self.status!r}"
            )

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    def get_shift(self, shift_id: str) -> Optional[EmployeeShift]:
        """Get one of this employee's shifts by id."""
        for shift in self.shifts:
            if shift.id == shift_id:
                return shift
        return None


@dataclass
class ShiftTemplate:
    """
    A reusable start/end pattern for one employee.

    Shifts generated from a template are snapshots; editing the template
    never changes them.
    """

    id: str
    name: str
    employee_id: str
    start_time: str
    end_time: str
    weekdays: List[str] = field(default_factory=list)  # "sun" .. "sat"
    notes: Optional[str] = None

    def __post_init__(self):
        _check_time("start_time", self.start_time)
        _check_time("end_time", self.end_time)
        unknown = [day for day in self.weekdays if day not in WEEKDAYS]
        if unknown:
            raise ValueError(
                f"Unknown weekday(s) {', '.join(unknown)}. "
                f"Valid names: {', '.join(WEEKDAYS)}"
            )

    def applies_on(self, check_date: date) -> bool:
        """Check if the template's weekdays include this date."""
        # date.weekday() is 0=Mon; WEEKDAYS starts on Sunday
        return WEEKDAYS[(check_date.weekday() + 1) % 7] in self.weekdays


@dataclass
class DayCrossingSeries:
    """One multi-day shift, stored as one EmployeeShift per covered date."""

    id: str
    employee_id: str
    base_notes: str
    dates: List[date]
    start_time: str
    end_time: str

    @property
    def day_count(self) -> int:
        return len(self.dates)


@dataclass
class DragState:
    """Transient state of a drag-to-create gesture."""

    current_employee: str
    start_time: str  # Slot id where the press happened
    current_time: str  # Slot id currently under the pointer


@dataclass
class BarResizeState:
    """Transient state of a bar-resize gesture."""

    employee_id: str
    block_index: int
    direction: str  # "start" or "end"
    original_start_time: str
    original_end_time: str
    current_time: str


@dataclass
class Roster:
    """All employees, templates and day-crossing series being edited."""

    employees: List[Employee] = field(default_factory=list)
    templates: List[ShiftTemplate] = field(default_factory=list)
    series: Dict[str, DayCrossingSeries] = field(default_factory=dict)

    def find_employee(self, employee_id: str) -> Optional[Employee]:
        """Get an employee by id, or None if unknown."""
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    def get_employee(self, employee_id: str) -> Employee:
        """Get an employee by id."""
        employee = self.find_employee(employee_id)
        if employee is None:
            raise ValueError(f"Employee '{employee_id}' not found")
        return employee

    def get_template(self, template_id: str) -> ShiftTemplate:
        """Get a template by id."""
        for template in self.templates:
            if template.id == template_id:
                return template
        raise ValueError(f"Template '{template_id}' not found")

    @property
    def active_employees(self) -> List[Employee]:
        return [emp for emp in self.employees if emp.is_active]
