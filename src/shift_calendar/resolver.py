"""
Resolving and validating a shift's effective start and end times.
"""

from typing import NamedTuple

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, parse_time_to_minutes
from .models import EmployeeShift


class TimeRange(NamedTuple):
    start_time: str
    end_time: str

    @property
    def is_resolved(self) -> bool:
        return bool(self.start_time) and bool(self.end_time)


def resolve_shift_time_range(
    shift: EmployeeShift, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> TimeRange:
    """
    Resolve the effective start and end of a shift.

    Explicit start_time/end_time win over the time slot, bound by bound.
    A bound that cannot be resolved comes back as an empty string.
    """
    slot = catalog.get(shift.time_slot)
    start_time = shift.start_time or (slot.start if slot else "")
    end_time = shift.end_time or (slot.end if slot else "")
    return TimeRange(start_time, end_time)


def is_valid_shift_duration(
    shift: EmployeeShift, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> bool:
    """
    Check that a shift's resolved end comes after its resolved start.

    There is no rollover: 23:00-01:00 is invalid here. Overnight work is
    stored as one record per date (see day_crossing).
    """
    start_time, end_time = resolve_shift_time_range(shift, catalog)
    if not start_time or not end_time:
        return False
    return parse_time_to_minutes(end_time) > parse_time_to_minutes(start_time)
