"""
Overlap classification between candidate time slots and existing shifts.
"""

import logging
from datetime import date
from typing import Collection, Dict, Iterable, List, Optional, Sequence

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, is_time_overlap
from .merge import shifts_for_date
from .models import Employee, Roster
from .resolver import resolve_shift_time_range

logger = logging.getLogger(__name__)

NONE = "none"
PARTIAL = "partial"
FULL = "full"
DUPLICATE_STATUSES = (NONE, PARTIAL, FULL)


def check_duplicate(
    roster: Roster, employee_id: str, shift_date: date, time_slot_ids: Iterable[str]
) -> str:
    """
    Classify how far candidate slots are already booked on a date.

    Returns:
        "none" if no candidate slot is booked (always for an empty
        candidate list or an unknown employee), "full" if every candidate
        slot is booked, "partial" otherwise
    """
    candidates = set(time_slot_ids)
    employee = roster.find_employee(employee_id)
    if not candidates or employee is None:
        return NONE

    booked = {
        shift.time_slot
        for shift in shifts_for_date(employee, shift_date)
        if shift.time_slot
    }
    overlap = candidates & booked

    if not overlap:
        return NONE
    if len(overlap) == len(candidates):
        return FULL
    return PARTIAL


def overlapping_shift_ids(
    employee: Employee, shift_date: date, time_slot_ids: Iterable[str]
) -> List[str]:
    """Ids of an employee's shifts on a date booked on any candidate slot."""
    candidates = set(time_slot_ids)
    return [
        shift.id
        for shift in shifts_for_date(employee, shift_date)
        if shift.time_slot in candidates and shift.id is not None
    ]


def classify_dates(
    roster: Roster,
    employee_id: str,
    dates: Sequence[date],
    start_time: str,
    end_time: str,
    catalog: TimeSlotCatalog = DEFAULT_CATALOG,
) -> Dict[date, str]:
    """Per-date duplicate classification for a candidate time range."""
    slot_ids = catalog.slot_ids_in_range(start_time, end_time)
    return {
        shift_date: check_duplicate(roster, employee_id, shift_date, slot_ids)
        for shift_date in dates
    }


def check_shift_overlap(
    employee: Employee,
    shift_date: date,
    start_time: str,
    end_time: str,
    exclude_shift_ids: Collection[str] = (),
    status: Optional[str] = None,
    catalog: TimeSlotCatalog = DEFAULT_CATALOG,
) -> bool:
    """
    Check if a time range collides with an existing same-status shift.

    Ranges that only touch are not collisions, so adjacent shifts can be
    merged. With no status given nothing counts as a collision.
    """
    if status is None:
        return False

    for shift in shifts_for_date(employee, shift_date):
        if shift.id is not None and shift.id in exclude_shift_ids:
            continue
        if shift.status != status:
            continue
        existing = resolve_shift_time_range(shift, catalog)
        if not existing.is_resolved:
            continue
        if is_time_overlap(start_time, end_time, existing.start_time, existing.end_time):
            logger.debug(
                "Overlap for %s on %s: %s-%s collides with %s (%s-%s)",
                employee.id,
                shift_date,
                start_time,
                end_time,
                shift.id,
                existing.start_time,
                existing.end_time,
            )
            return True

    return False
