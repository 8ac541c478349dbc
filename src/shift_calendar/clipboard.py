"""
Copy and paste of shifts between dates.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, is_time_overlap
from .day_crossing import has_day_crossing_tag, strip_day_crossing_tag
from .merge import shifts_for_date
from .models import DayCrossingSeries, EmployeeShift, Roster
from .resolver import resolve_shift_time_range

logger = logging.getLogger(__name__)

MODE_NONE = "none"
MODE_COPY = "copy"
MODE_PASTE = "paste"

PENDING_CONFLICT = "overlaps another shift being pasted"
EXISTING_CONFLICT = "overlaps an existing shift"


@dataclass
class PasteConflict:
    employee_name: str
    date: date
    time_range: str
    reason: str


@dataclass
class PasteResult:
    """Shifts created by a paste, or the conflicts that stopped it."""

    created: List[EmployeeShift] = field(default_factory=list)
    conflicts: List[PasteConflict] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.conflicts

    @property
    def message(self) -> str:
        if self.succeeded:
            return f"Pasted {len(self.created)} shift(s)"
        lines = ["Nothing was pasted because these shifts overlap:"]
        for conflict in self.conflicts:
            lines.append(
                f"  - {conflict.employee_name} ({conflict.date.isoformat()} "
                f"{conflict.time_range}): {conflict.reason}"
            )
        return "\n".join(lines)


@dataclass
class _PendingShift:
    source: EmployeeShift
    date: date
    start_time: str
    end_time: str
    series_id: str = ""


class ShiftClipboard:
    """Select shifts, copy the working ones, paste them onto other dates.

    Day-crossing groups are pasted as a whole, as a new series starting at
    each target date. A paste either creates every shift or, if anything
    overlaps, none of them.

    ``on_change`` is called after a paste that created shifts, so the
    caller can flag its unsaved changes.
    """

    def __init__(
        self,
        catalog: TimeSlotCatalog = DEFAULT_CATALOG,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.catalog = catalog
        self.on_change = on_change
        self.mode = MODE_NONE
        self.selected_shifts: List[EmployeeShift] = []
        self.copied_shifts: List[EmployeeShift] = []
        self.pending_paste_dates: List[date] = []

    def start_copy_mode(self) -> None:
        self.mode = MODE_COPY
        self.selected_shifts = []
        self.copied_shifts = []

    def start_paste_mode(self) -> bool:
        """Switch to paste mode; False if nothing has been copied."""
        if not self.copied_shifts:
            return False
        self.mode = MODE_PASTE
        self.selected_shifts = []
        self.pending_paste_dates = []
        return True

    def toggle_shift(self, shift: EmployeeShift) -> None:
        """Select or unselect a shift while copying."""
        if self.mode != MODE_COPY:
            return
        if any(selected.id == shift.id for selected in self.selected_shifts):
            self.selected_shifts = [s for s in self.selected_shifts if s.id != shift.id]
        else:
            self.selected_shifts.append(shift)

    def toggle_date(self, target_date: date) -> None:
        """Select or unselect a paste target date."""
        if self.mode != MODE_PASTE:
            return
        if target_date in self.pending_paste_dates:
            self.pending_paste_dates.remove(target_date)
        else:
            self.pending_paste_dates.append(target_date)

    def execute_copy(self) -> int:
        """
        Copy the selected working shifts and switch to paste mode.

        Returns:
            Number of shifts copied; 0 leaves the clipboard in copy mode
        """
        working = [shift for shift in self.selected_shifts if shift.is_working]
        if not working:
            return 0

        self.copied_shifts = working
        self.selected_shifts = []
        self.mode = MODE_PASTE
        self.pending_paste_dates = []
        return len(working)

    def cancel(self) -> None:
        self.mode = MODE_NONE
        self.selected_shifts = []
        self.pending_paste_dates = []

    def execute_paste(
        self, roster: Roster, add_shift: Callable[[str, EmployeeShift], object]
    ) -> PasteResult:
        """
        Paste the copied shifts onto every pending date.

        Nothing is added if any pasted shift would overlap an existing shift
        or another pasted shift of the same employee on the same date.
        """
        result = PasteResult()
        if not self.pending_paste_dates:
            return result

        normal, groups = self._split_groups()
        pending: Dict[Tuple[str, date], List[_PendingShift]] = {}

        for target in self.pending_paste_dates:
            for shift in normal:
                self._stage(roster, pending, result, shift, target)

        for target in self.pending_paste_dates:
            for members in groups:
                series_id = f"series-{uuid.uuid4().hex[:12]}"
                for offset, member in enumerate(members):
                    self._stage(
                        roster,
                        pending,
                        result,
                        member,
                        target + timedelta(days=offset),
                        series_id,
                    )

        if result.conflicts:
            logger.debug("Paste aborted with %d conflict(s)", len(result.conflicts))
            return result

        staged = [item for items in pending.values() for item in items]
        self._register_series(roster, staged)
        for item in staged:
            new_shift = replace(
                item.source,
                id=None,
                date=item.date,
                series_id=item.series_id or None,
                series_position=item.source.series_position if item.series_id else None,
            )
            add_shift(new_shift.employee_id, new_shift)
            result.created.append(new_shift)

        self.pending_paste_dates = []
        self.mode = MODE_NONE
        if result.created and self.on_change is not None:
            self.on_change()
        return result

    def _split_groups(self) -> Tuple[List[EmployeeShift], List[List[EmployeeShift]]]:
        normal: List[EmployeeShift] = []
        groups: Dict[Tuple[str, str], List[EmployeeShift]] = {}

        for shift in self.copied_shifts:
            if shift.series_id:
                key = (shift.employee_id, shift.series_id)
            elif has_day_crossing_tag(shift.notes):
                key = (shift.employee_id, "notes:" + strip_day_crossing_tag(shift.notes))
            else:
                normal.append(shift)
                continue
            groups.setdefault(key, []).append(shift)

        ordered = [sorted(members, key=lambda s: s.date) for members in groups.values()]
        return normal, ordered

    def _stage(
        self,
        roster: Roster,
        pending: Dict[Tuple[str, date], List[_PendingShift]],
        result: PasteResult,
        shift: EmployeeShift,
        target: date,
        series_id: str = "",
    ) -> None:
        employee = roster.find_employee(shift.employee_id)
        if employee is None:
            return
        start_time, end_time = resolve_shift_time_range(shift, self.catalog)
        if not start_time or not end_time:
            return

        key = (shift.employee_id, target)
        staged = pending.setdefault(key, [])
        time_range = f"{start_time}-{end_time}"

        if any(
            is_time_overlap(start_time, end_time, other.start_time, other.end_time)
            for other in staged
        ):
            result.conflicts.append(
                PasteConflict(employee.name, target, time_range, PENDING_CONFLICT)
            )
            return

        for existing in shifts_for_date(employee, target):
            bounds = resolve_shift_time_range(existing, self.catalog)
            if bounds.is_resolved and is_time_overlap(
                start_time, end_time, bounds.start_time, bounds.end_time
            ):
                result.conflicts.append(
                    PasteConflict(employee.name, target, time_range, EXISTING_CONFLICT)
                )
                return

        staged.append(_PendingShift(shift, target, start_time, end_time, series_id))

    @staticmethod
    def _register_series(roster: Roster, staged: List[_PendingShift]) -> None:
        by_series: Dict[str, List[_PendingShift]] = {}
        for item in staged:
            if item.series_id:
                by_series.setdefault(item.series_id, []).append(item)

        for series_id, items in by_series.items():
            items.sort(key=lambda item: item.date)
            roster.series[series_id] = DayCrossingSeries(
                id=series_id,
                employee_id=items[0].source.employee_id,
                base_notes=strip_day_crossing_tag(items[0].source.notes),
                dates=[item.date for item in items],
                start_time=items[0].start_time,
                end_time=items[-1].end_time,
            )
