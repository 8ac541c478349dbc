"""
Bulk assignment: one time range applied to many dates for one employee.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog
from .conflicts import FULL, PARTIAL, check_duplicate, overlapping_shift_ids
from .merge import build_shift_blocks
from .models import WORKING, EmployeeShift, Roster, ShiftTemplate, is_time_string

logger = logging.getLogger(__name__)

AddShift = Callable[[str, EmployeeShift], object]
DeleteMultipleShifts = Callable[[str, List[str]], object]


@dataclass
class BulkAssignmentRequest:
    """What to assign: one employee, one time range, many dates."""

    employee_id: str
    dates: List[date]
    start_time: str = "09:00"
    end_time: str = "17:00"
    notes: str = ""

    def __post_init__(self):
        for name, value in (("start_time", self.start_time), ("end_time", self.end_time)):
            if not is_time_string(value):
                raise ValueError(f"{name} must be an HH:MM string, got {value!r}")
        if self.end_time <= self.start_time:
            raise ValueError(
                f"End time {self.end_time} must be after start time {self.start_time}"
            )

    @classmethod
    def from_template(
        cls, template: ShiftTemplate, dates: Iterable[date]
    ) -> "BulkAssignmentRequest":
        """Copy employee, times and notes from a template.

        The request keeps no reference to the template.
        """
        return cls(
            employee_id=template.employee_id,
            dates=list(dates),
            start_time=template.start_time,
            end_time=template.end_time,
            notes=template.notes or "",
        )


@dataclass
class DatePlan:
    """The decision for one target date, made before anything is mutated."""

    date: date
    duplicate_status: str
    slot_ids: List[str]
    overlapping_ids: List[str] = field(default_factory=list)

    @property
    def will_skip(self) -> bool:
        return self.duplicate_status == FULL


@dataclass
class BulkAssignmentResult:
    """Outcome counts of a bulk assignment run."""

    success_count: int = 0
    skip_count: int = 0
    plans: List[DatePlan] = field(default_factory=list)

    @property
    def assigned_dates(self) -> List[date]:
        return [plan.date for plan in self.plans if not plan.will_skip]

    @property
    def skipped_dates(self) -> List[date]:
        return [plan.date for plan in self.plans if plan.will_skip]

    @property
    def summary(self) -> str:
        """Human-readable one-line result for the user."""
        message = f"Registered shifts for {self.success_count} day(s)"
        if self.skip_count > 0:
            message += f" ({self.skip_count} day(s) skipped as duplicates)"
        return message


class BulkAssigner:
    """Applies a BulkAssignmentRequest through injected mutation functions."""

    def __init__(
        self,
        roster: Roster,
        add_shift: AddShift,
        delete_multiple_shifts: DeleteMultipleShifts,
        catalog: TimeSlotCatalog = DEFAULT_CATALOG,
    ):
        self.roster = roster
        self.add_shift = add_shift
        self.delete_multiple_shifts = delete_multiple_shifts
        self.catalog = catalog

    def preview(self, request: BulkAssignmentRequest) -> List[DatePlan]:
        """
        Classify every target date against the current shifts.

        Pure: used for live feedback and as the plan that assign() executes.
        """
        slot_ids = self.catalog.slot_ids_in_range(request.start_time, request.end_time)
        employee = self.roster.find_employee(request.employee_id)

        plans = []
        for shift_date in request.dates:
            status = check_duplicate(
                self.roster, request.employee_id, shift_date, slot_ids
            )
            overlapping = []
            if status == PARTIAL and employee is not None:
                overlapping = overlapping_shift_ids(employee, shift_date, slot_ids)
            plans.append(DatePlan(shift_date, status, list(slot_ids), overlapping))
        return plans

    def assign(self, request: BulkAssignmentRequest) -> BulkAssignmentResult:
        """
        Run the bulk assignment.

        Every date is classified against the shifts as they were before the
        run, and dates are processed in the given order. A date listed
        twice is therefore assigned twice; the run does not see its own
        additions.

        Returns:
            BulkAssignmentResult with success and skip counts
        """
        result = BulkAssignmentResult(plans=self.preview(request))

        for plan in result.plans:
            if plan.will_skip:
                logger.debug("Skipping %s: all slots already booked", plan.date)
                result.skip_count += 1
                continue

            if plan.duplicate_status == PARTIAL and plan.overlapping_ids:
                logger.debug(
                    "Replacing %d overlapping shift(s) on %s",
                    len(plan.overlapping_ids),
                    plan.date,
                )
                self.delete_multiple_shifts(request.employee_id, plan.overlapping_ids)

            for slot_id in plan.slot_ids:
                self.add_shift(
                    request.employee_id,
                    EmployeeShift(
                        employee_id=request.employee_id,
                        date=plan.date,
                        status=WORKING,
                        time_slot=slot_id,
                        notes=request.notes,
                    ),
                )

            result.success_count += 1

        logger.debug(
            "Bulk assignment for %s: %d assigned, %d skipped",
            request.employee_id,
            result.success_count,
            result.skip_count,
        )
        return result

    def assign_template(
        self, template: ShiftTemplate, dates: Iterable[date]
    ) -> BulkAssignmentResult:
        return self.assign(BulkAssignmentRequest.from_template(template, dates))


def dates_for_template(
    template: ShiftTemplate, start: date, end: date
) -> List[date]:
    """Dates in [start, end] falling on one of the template's weekdays."""
    return [
        day
        for day in date_range(start, end)
        if template.applies_on(day)
    ]


def date_range(start: date, end: date) -> List[date]:
    """Every date from start to end, inclusive."""
    return [start + timedelta(days=k) for k in range((end - start).days + 1)]


def coverage(
    roster: Roster,
    employee_id: str,
    shift_date: date,
    catalog: TimeSlotCatalog = DEFAULT_CATALOG,
) -> Optional[Tuple[str, str]]:
    """The (first start, last end) an employee is booked on a date, if any."""
    employee = roster.find_employee(employee_id)
    if employee is None:
        return None
    blocks = build_shift_blocks(employee, shift_date, catalog)
    if not blocks:
        return None
    return blocks[0].start_time, blocks[-1].end_time
