"""
Detecting and building contiguous same-status blocks of shifts.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, parse_time_to_minutes
from .models import WORKING, Employee, EmployeeShift
from .resolver import resolve_shift_time_range


@dataclass
class ShiftBlock:
    """Contiguous same-status shifts drawn as one bar."""

    start_time: str
    end_time: str
    status: str
    shifts: List[EmployeeShift] = field(default_factory=list)
    customer_name: Optional[str] = None
    notes: Optional[str] = None

    @property
    def shift_ids(self) -> List[str]:
        return [shift.id for shift in self.shifts if shift.id is not None]


def shifts_for_date(employee: Employee, shift_date: date) -> List[EmployeeShift]:
    """An employee's shifts on one date, in stored order."""
    return [shift for shift in employee.shifts if shift.date == shift_date]


def _sorted_by_start(
    shifts: List[EmployeeShift], catalog: TimeSlotCatalog
) -> List[EmployeeShift]:
    # "HH:MM" is fixed width, so text order is time order
    return sorted(
        shifts, key=lambda shift: resolve_shift_time_range(shift, catalog).start_time
    )


def needs_merging(
    employee: Employee, shift_date: date, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> bool:
    """
    Check if any two of an employee's shifts on a date form one block.

    Two shifts form one block when they have the same status and the first
    ends exactly when the next starts. Stops at the first such pair.
    """
    day_shifts = shifts_for_date(employee, shift_date)
    if len(day_shifts) < 2:
        return False

    ordered = _sorted_by_start(day_shifts, catalog)
    for current, following in zip(ordered, ordered[1:]):
        current_end = resolve_shift_time_range(current, catalog).end_time
        following_start = resolve_shift_time_range(following, catalog).start_time
        if current.status == following.status and current_end == following_start:
            return True

    return False


def build_shift_blocks(
    employee: Employee, shift_date: date, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> List[ShiftBlock]:
    """
    Group an employee's shifts on a date into contiguous blocks.

    Shifts whose times cannot be resolved are left out.
    """
    blocks: List[ShiftBlock] = []
    current: Optional[ShiftBlock] = None

    for shift in _sorted_by_start(shifts_for_date(employee, shift_date), catalog):
        time_range = resolve_shift_time_range(shift, catalog)
        if not time_range.is_resolved:
            continue

        if (
            current is not None
            and current.status == shift.status
            and current.end_time == time_range.start_time
        ):
            current.end_time = time_range.end_time
            current.shifts.append(shift)
            continue

        current = ShiftBlock(
            start_time=time_range.start_time,
            end_time=time_range.end_time,
            status=shift.status,
            shifts=[shift],
            customer_name=shift.customer_name,
            notes=shift.notes,
        )
        blocks.append(current)

    return blocks


def working_minutes(
    employee: Employee, shift_date: date, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> int:
    """Total minutes of working blocks for an employee on a date."""
    return sum(
        parse_time_to_minutes(block.end_time) - parse_time_to_minutes(block.start_time)
        for block in build_shift_blocks(employee, shift_date, catalog)
        if block.status == WORKING
    )
