"""
Day-crossing (multi-day) shifts.

A shift spanning several dates is stored as one EmployeeShift per covered
date. Each record carries an explicit ``series_id`` pointing into
``Roster.series`` and a ``series_position``. Each record also carries a
tag at the end of its notes, e.g. ``"Osaka move (day-crossing: origin)"``,
so that records written without a series id can still be grouped by
their tag-stripped notes.
"""

import logging
import re
import uuid
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from .models import (
    WORKING,
    DayCrossingSeries,
    Employee,
    EmployeeShift,
    Roster,
    is_time_string,
)

logger = logging.getLogger(__name__)

ORIGIN = "origin"
MIDDLE = "middle"
TERMINAL = "terminal"

DAY_CROSSING_MARKER = "(day-crossing:"
DAY_CROSSING_TAG_PATTERN = re.compile(
    r"\s*\(day-crossing: (?:day \d+|middle|origin|terminal)\)\s*"
)

START_OF_DAY = "00:00"
END_OF_DAY = "24:00"


def day_crossing_tag(position: str, day_number: int = 0) -> str:
    """Build the notes tag for a position; middle days are tagged by number."""
    if position == MIDDLE:
        return f"(day-crossing: day {day_number})"
    if position in (ORIGIN, TERMINAL):
        return f"(day-crossing: {position})"
    raise ValueError(f"Unknown day-crossing position: {position!r}")


def has_day_crossing_tag(notes: Optional[str]) -> bool:
    return bool(notes) and DAY_CROSSING_MARKER in notes


def strip_day_crossing_tag(notes: Optional[str]) -> str:
    """Remove day-crossing tags from notes, leaving the caller-visible note."""
    if not notes:
        return ""
    return DAY_CROSSING_TAG_PATTERN.sub("", notes).strip()


def get_related_day_crossing_shifts(
    roster: Roster, employee_id: str, base_notes: str
) -> List[EmployeeShift]:
    """
    Find an employee's day-crossing shifts whose stripped notes equal base_notes.

    Grouping is by (employee, exact stripped-note text) only, so two
    unrelated series with identical notes come back together. Use
    get_series_shifts when the shifts carry a series id.
    """
    employee = roster.find_employee(employee_id)
    if employee is None:
        return []

    return [
        shift
        for shift in employee.shifts
        if has_day_crossing_tag(shift.notes)
        and strip_day_crossing_tag(shift.notes) == base_notes
    ]


def get_series_shifts(employee: Employee, series_id: str) -> List[EmployeeShift]:
    """All of an employee's shifts in one series, ordered by date."""
    members = [shift for shift in employee.shifts if shift.series_id == series_id]
    return sorted(members, key=lambda shift: shift.date)


def find_day_crossing_group(
    employee: Employee, shift: EmployeeShift
) -> List[EmployeeShift]:
    """
    The whole day-crossing group a shift belongs to.

    Prefers the explicit series id and falls back to note matching for
    tagged shifts without one. Returns an empty list for ordinary shifts.
    """
    if shift.series_id:
        return get_series_shifts(employee, shift.series_id)

    if not has_day_crossing_tag(shift.notes):
        return []

    base_notes = strip_day_crossing_tag(shift.notes)
    members = [
        other
        for other in employee.shifts
        if not other.series_id
        and has_day_crossing_tag(other.notes)
        and strip_day_crossing_tag(other.notes) == base_notes
    ]
    return sorted(members, key=lambda other: other.date)


def _tagged_notes(base_notes: str, tag: str) -> str:
    return f"{base_notes} {tag}" if base_notes else tag


def plan_day_crossing_shifts(
    employee_id: str,
    start_date: date,
    end_date: date,
    start_time: str,
    end_time: str,
    notes: str = "",
    status: str = WORKING,
    series_id: Optional[str] = None,
) -> Tuple[DayCrossingSeries, List[EmployeeShift]]:
    """
    Split a multi-day shift into one record per date.

    The origin runs from start_time to 24:00, middle days cover the whole
    day and the terminal runs from 00:00 to end_time. Nothing is stored;
    the caller registers the series and adds the shifts.

    Raises:
        ValueError: If the range does not cross at least one midnight or
            the times are malformed
    """
    if end_date <= start_date:
        raise ValueError(
            f"A day-crossing shift must end after its start date "
            f"({start_date} - {end_date})"
        )
    for name, value in (("start_time", start_time), ("end_time", end_time)):
        if not is_time_string(value):
            raise ValueError(f"{name} must be an HH:MM string, got {value!r}")
    if start_time == END_OF_DAY or end_time == START_OF_DAY:
        raise ValueError(
            "A day-crossing shift cannot start at 24:00 or end at 00:00; "
            "adjust the dates instead"
        )

    base_notes = strip_day_crossing_tag(notes)
    series_id = series_id or f"series-{uuid.uuid4().hex[:12]}"
    day_count = (end_date - start_date).days + 1
    dates = [start_date + timedelta(days=k) for k in range(day_count)]

    shifts = []
    for day_index, shift_date in enumerate(dates):
        if day_index == 0:
            position, bounds = ORIGIN, (start_time, END_OF_DAY)
        elif day_index == day_count - 1:
            position, bounds = TERMINAL, (START_OF_DAY, end_time)
        else:
            position, bounds = MIDDLE, (START_OF_DAY, END_OF_DAY)

        shifts.append(
            EmployeeShift(
                employee_id=employee_id,
                date=shift_date,
                status=status,
                start_time=bounds[0],
                end_time=bounds[1],
                notes=_tagged_notes(
                    base_notes, day_crossing_tag(position, day_index + 1)
                ),
                series_id=series_id,
                series_position=position,
            )
        )

    series = DayCrossingSeries(
        id=series_id,
        employee_id=employee_id,
        base_notes=base_notes,
        dates=dates,
        start_time=start_time,
        end_time=end_time,
    )
    return series, shifts


def add_day_crossing_shift(
    roster: Roster,
    add_shift: Callable[[str, EmployeeShift], object],
    employee_id: str,
    start_date: date,
    end_date: date,
    start_time: str,
    end_time: str,
    notes: str = "",
    status: str = WORKING,
) -> DayCrossingSeries:
    """Plan a day-crossing shift, record its series and add every record."""
    series, shifts = plan_day_crossing_shifts(
        employee_id, start_date, end_date, start_time, end_time, notes, status
    )
    roster.series[series.id] = series
    for shift in shifts:
        add_shift(employee_id, shift)

    logger.debug(
        "Added day-crossing series %s for %s over %d day(s)",
        series.id,
        employee_id,
        series.day_count,
    )
    return series
