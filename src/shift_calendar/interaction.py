"""
Calendar interaction state machine.

Drag-to-create and bar-resize gestures are modelled as a tagged union of
states (Idle, Dragging, Resizing) that only changes through the methods of
CalendarInteraction. Nothing is mutated while a gesture is in progress;
the injected store functions are called once, when the gesture commits.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, List, Optional, Tuple, Union

from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, is_time_overlap
from .conflicts import check_shift_overlap
from .day_crossing import find_day_crossing_group
from .merge import ShiftBlock, build_shift_blocks, shifts_for_date
from .models import WORKING, BarResizeState, DragState, Employee, EmployeeShift, Roster
from .resolver import is_valid_shift_duration, resolve_shift_time_range

logger = logging.getLogger(__name__)

COMMITTED = "committed"
CANCELLED = "cancelled"
REJECTED = "rejected"
IGNORED = "ignored"

RESIZE_START = "start"
RESIZE_END = "end"


class InteractionError(Exception):
    """Raised when the state machine is driven with invalid arguments."""

    pass


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""


@dataclass(frozen=True)
class Dragging:
    """A create-by-drag gesture is in progress."""

    drag: DragState
    date: date


@dataclass(frozen=True)
class Resizing:
    """A bar-resize gesture is in progress on one block."""

    resize: BarResizeState
    date: date


InteractionState = Union[Idle, Dragging, Resizing]


@dataclass
class GestureResult:
    """What happened when a gesture or edit finished.

    ``shift`` is the first record written; ``shifts`` holds every record
    of a gesture that books several slots.
    """

    outcome: str
    shift: Optional[EmployeeShift] = None
    reason: str = ""
    shifts: List[EmployeeShift] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.outcome == COMMITTED


class CalendarInteraction:
    """Drives drag/resize gestures and tracks the unsaved-changes flag.

    The presentation layer calls the action methods from its event handlers
    and reads ``state``, ``drag_state``, ``bar_resize_state`` and
    ``has_unsaved_changes``. Shifts are changed only through the injected
    store functions.
    """

    def __init__(
        self,
        roster: Roster,
        add_shift: Callable[[str, EmployeeShift], object],
        update_shift: Callable[[str, EmployeeShift], object],
        delete_shift: Callable[[str, str], object],
        delete_multiple_shifts: Callable[[str, List[str]], object],
        catalog: TimeSlotCatalog = DEFAULT_CATALOG,
        on_state_change: Optional[Callable[[InteractionState], None]] = None,
    ):
        self.roster = roster
        self.add_shift = add_shift
        self.update_shift = update_shift
        self.delete_shift_fn = delete_shift
        self.delete_multiple_shifts = delete_multiple_shifts
        self.catalog = catalog
        self.on_state_change = on_state_change
        self.state: InteractionState = Idle()
        self.has_unsaved_changes = False

    # ------------------------------------------------------------------
    # Accessors

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def drag_state(self) -> Optional[DragState]:
        return self.state.drag if isinstance(self.state, Dragging) else None

    @property
    def bar_resize_state(self) -> Optional[BarResizeState]:
        return self.state.resize if isinstance(self.state, Resizing) else None

    def preview_range(self) -> Optional[Tuple[str, str]]:
        """The (start, end) the active gesture would commit, for highlighting."""
        if isinstance(self.state, Dragging):
            return self._drag_range(self.state.drag)
        if isinstance(self.state, Resizing):
            return self._resize_range(self.state.resize)
        return None

    # ------------------------------------------------------------------
    # Drag to create

    def press(self, employee_id: str, shift_date: date, slot_id: str) -> bool:
        """Start a drag on an empty cell. Returns False if nothing started."""
        if not self.is_idle:
            logger.debug("Press ignored: %s in progress", type(self.state).__name__)
            return False

        slot = self.catalog.get(slot_id)
        employee = self.roster.find_employee(employee_id)
        if slot is None or employee is None:
            return False
        if self._cell_is_booked(employee, shift_date, slot.start, slot.end):
            return False

        self._transition(Dragging(DragState(employee_id, slot_id, slot_id), shift_date))
        return True

    def enter(self, employee_id: str, slot_id: str) -> None:
        """Pointer moved over a cell while a gesture is active."""
        if isinstance(self.state, Dragging):
            drag = self.state.drag
            if drag.current_employee == employee_id and slot_id in self.catalog:
                self._transition(
                    Dragging(replace(drag, current_time=slot_id), self.state.date)
                )
        elif isinstance(self.state, Resizing):
            self._resize_enter(employee_id, slot_id)

    def release(
        self, employee_id: Optional[str] = None, slot_id: Optional[str] = None
    ) -> GestureResult:
        """
        Pointer released.

        A drag commits when released over a cell of the same employee and
        is cancelled anywhere else. A resize always tries to commit.
        """
        if isinstance(self.state, Dragging):
            drag = self.state.drag
            if employee_id != drag.current_employee or slot_id not in self.catalog:
                return self.cancel()
            self.enter(employee_id, slot_id)
            return self._commit_drag()

        if isinstance(self.state, Resizing):
            return self.end_resize()

        return GestureResult(IGNORED)

    def cancel(self) -> GestureResult:
        """Abandon the active gesture without touching any shift."""
        if self.is_idle:
            return GestureResult(IGNORED)
        self._transition(Idle())
        return GestureResult(CANCELLED)

    def _drag_range(self, drag: DragState) -> Tuple[str, str]:
        first = self.catalog.index_of(drag.start_time)
        last = self.catalog.index_of(drag.current_time)
        low, high = min(first, last), max(first, last)
        return self.catalog[low].start, self.catalog[high].end

    def _commit_drag(self) -> GestureResult:
        """Book one record per slot in the dragged range.

        Each record carries its own slot bounds, so the duplicate checker
        sees every booked slot and the records still draw as one block.
        """
        state = self.state
        drag = state.drag
        start_time, end_time = self._drag_range(drag)
        first = self.catalog.index_of(drag.start_time)
        last = self.catalog.index_of(drag.current_time)

        shifts = [
            EmployeeShift(
                employee_id=drag.current_employee,
                date=state.date,
                status=WORKING,
                start_time=slot.start,
                end_time=slot.end,
                time_slot=slot.id,
                customer_name="",
                notes="",
            )
            for slot in self.catalog.slots[min(first, last) : max(first, last) + 1]
        ]

        self._transition(Idle())

        employee = self.roster.find_employee(drag.current_employee)
        if employee is None:
            return GestureResult(REJECTED, shifts[0], "Employee no longer exists", shifts)
        if check_shift_overlap(
            employee, state.date, start_time, end_time, status=WORKING, catalog=self.catalog
        ):
            return GestureResult(
                REJECTED, shifts[0], "Time range already has a shift", shifts
            )

        for shift in shifts:
            self.add_shift(drag.current_employee, shift)
        self.has_unsaved_changes = True
        logger.debug(
            "Created %d shift(s) for %s on %s: %s-%s",
            len(shifts),
            drag.current_employee,
            state.date,
            start_time,
            end_time,
        )
        return GestureResult(COMMITTED, shifts[0], shifts=shifts)

    def _cell_is_booked(
        self, employee: Employee, shift_date: date, start: str, end: str
    ) -> bool:
        for shift in shifts_for_date(employee, shift_date):
            existing = resolve_shift_time_range(shift, self.catalog)
            if existing.is_resolved and is_time_overlap(
                start, end, existing.start_time, existing.end_time
            ):
                return True
        return False

    # ------------------------------------------------------------------
    # Bar resize

    def begin_resize(
        self, employee_id: str, shift_date: date, block_index: int, direction: str
    ) -> bool:
        """Grab one edge of a block. Returns False if nothing started."""
        if direction not in (RESIZE_START, RESIZE_END):
            raise InteractionError(
                f"Resize direction must be 'start' or 'end', got {direction!r}"
            )
        if not self.is_idle:
            logger.debug("Resize ignored: %s in progress", type(self.state).__name__)
            return False

        employee = self.roster.find_employee(employee_id)
        if employee is None:
            return False
        blocks = build_shift_blocks(employee, shift_date, self.catalog)
        if not 0 <= block_index < len(blocks):
            return False

        block = blocks[block_index]
        current = block.start_time if direction == RESIZE_START else block.end_time
        resize = BarResizeState(
            employee_id=employee_id,
            block_index=block_index,
            direction=direction,
            original_start_time=block.start_time,
            original_end_time=block.end_time,
            current_time=current,
        )
        self._transition(Resizing(resize, shift_date))
        return True

    def _resize_enter(self, employee_id: str, slot_id: str) -> None:
        resize = self.state.resize
        if resize.employee_id != employee_id:
            return
        slot = self.catalog.get(slot_id)
        if slot is None:
            return

        # The dragged edge may not cross the fixed edge
        if resize.direction == RESIZE_START:
            if slot.start >= resize.original_end_time:
                return
            new_time = slot.start
        else:
            if slot.end <= resize.original_start_time:
                return
            new_time = slot.end

        self._transition(Resizing(replace(resize, current_time=new_time), self.state.date))

    def _resize_range(self, resize: BarResizeState) -> Tuple[str, str]:
        if resize.direction == RESIZE_START:
            return resize.current_time, resize.original_end_time
        return resize.original_start_time, resize.current_time

    def end_resize(self) -> GestureResult:
        """
        Commit the active resize.

        The block is rewritten as one record per slot of the new bounds,
        the first keeping its id; a same-status block touching the new
        bounds is merged in. A result that fails duration validation or
        collides with another shift is rejected and the block keeps its
        original bounds.
        """
        if not isinstance(self.state, Resizing):
            return GestureResult(IGNORED)

        state = self.state
        resize = state.resize
        self._transition(Idle())

        new_start, new_end = self._resize_range(resize)
        if (new_start, new_end) == (resize.original_start_time, resize.original_end_time):
            return GestureResult(CANCELLED)

        employee = self.roster.find_employee(resize.employee_id)
        if employee is None:
            return GestureResult(REJECTED, reason="Employee no longer exists")
        blocks = build_shift_blocks(employee, state.date, self.catalog)
        block = self._find_block(blocks, resize)
        if block is None:
            return GestureResult(REJECTED, reason="Block no longer exists")

        primary = block.shifts[0]
        candidate = self._with_bounds(primary, new_start, new_end)
        if not is_valid_shift_duration(candidate, self.catalog):
            logger.debug(
                "Resize rejected for %s: %s-%s is not a valid duration",
                resize.employee_id,
                new_start,
                new_end,
            )
            return GestureResult(REJECTED, candidate, "End must be after start")

        block_ids = block.shift_ids
        if check_shift_overlap(
            employee,
            state.date,
            new_start,
            new_end,
            exclude_shift_ids=block_ids,
            status=primary.status,
            catalog=self.catalog,
        ):
            return GestureResult(REJECTED, candidate, "Time range already has a shift")

        doomed = [shift_id for shift_id in block_ids if shift_id != primary.id]
        neighbour = self._touching_block(blocks, block, new_start, new_end)
        if neighbour is not None:
            new_start = min(new_start, neighbour.start_time)
            new_end = max(new_end, neighbour.end_time)
            doomed.extend(neighbour.shift_ids)

        pieces = self._split_into_slots(primary, new_start, new_end)

        if doomed:
            self.delete_multiple_shifts(resize.employee_id, doomed)
        self.update_shift(resize.employee_id, pieces[0])
        for piece in pieces[1:]:
            self.add_shift(resize.employee_id, piece)
        self.has_unsaved_changes = True
        logger.debug(
            "Resized block of %s to %s-%s as %d shift(s)",
            resize.employee_id,
            new_start,
            new_end,
            len(pieces),
        )
        return GestureResult(COMMITTED, pieces[0], shifts=pieces)

    def _find_block(
        self, blocks: List[ShiftBlock], resize: BarResizeState
    ) -> Optional[ShiftBlock]:
        if 0 <= resize.block_index < len(blocks):
            block = blocks[resize.block_index]
            if (block.start_time, block.end_time) == (
                resize.original_start_time,
                resize.original_end_time,
            ):
                return block
        for block in blocks:
            if (block.start_time, block.end_time) == (
                resize.original_start_time,
                resize.original_end_time,
            ):
                return block
        return None

    @staticmethod
    def _touching_block(
        blocks: List[ShiftBlock], block: ShiftBlock, new_start: str, new_end: str
    ) -> Optional[ShiftBlock]:
        for other in blocks:
            if other is block or other.status != block.status:
                continue
            if other.start_time == new_end or other.end_time == new_start:
                return other
        return None

    def _split_into_slots(
        self, shift: EmployeeShift, start: str, end: str
    ) -> List[EmployeeShift]:
        """
        Rewrite a shift as one record per slot covering [start, end).

        The first record keeps the shift's id. Bounds that do not line up
        with contiguous catalog slots give a single record instead.
        """
        slots = self.catalog.slots_in_range(start, end)
        aligned = (
            bool(slots)
            and slots[0].start == start
            and slots[-1].end == end
            and all(a.end == b.start for a, b in zip(slots, slots[1:]))
        )
        if not aligned:
            return [self._with_bounds(shift, start, end)]

        pieces = [self._with_bounds(shift, slot.start, slot.end) for slot in slots]
        return pieces[:1] + [replace(piece, id=None) for piece in pieces[1:]]

    def _with_bounds(self, shift: EmployeeShift, start: str, end: str) -> EmployeeShift:
        slot = self.catalog.slot_starting_at(start)
        return replace(
            shift,
            start_time=start,
            end_time=end,
            time_slot=slot.id if slot else shift.time_slot,
        )

    # ------------------------------------------------------------------
    # Direct edits

    def add_single_shift(self, employee_id: str, shift: EmployeeShift) -> GestureResult:
        """Add one shift outside of a gesture, after validating it."""
        rejection = self._validate_edit(employee_id, shift, exclude_shift_ids=[])
        if rejection is not None:
            return rejection
        self.add_shift(employee_id, shift)
        self.has_unsaved_changes = True
        return GestureResult(COMMITTED, shift)

    def edit_shift(self, employee_id: str, shift: EmployeeShift) -> GestureResult:
        """Apply a manual edit to an existing shift, after validating it.

        The shift's own stored version is not counted as an overlap.
        """
        exclude = [shift.id] if shift.id is not None else []
        rejection = self._validate_edit(employee_id, shift, exclude_shift_ids=exclude)
        if rejection is not None:
            return rejection
        self.update_shift(employee_id, shift)
        self.has_unsaved_changes = True
        return GestureResult(COMMITTED, shift)

    def _validate_edit(
        self, employee_id: str, shift: EmployeeShift, exclude_shift_ids: List[str]
    ) -> Optional[GestureResult]:
        if not is_valid_shift_duration(shift, self.catalog):
            return GestureResult(REJECTED, shift, "End must be after start")

        employee = self.roster.find_employee(employee_id)
        if employee is None:
            return GestureResult(REJECTED, shift, "Employee no longer exists")
        start_time, end_time = resolve_shift_time_range(shift, self.catalog)
        if check_shift_overlap(
            employee,
            shift.date,
            start_time,
            end_time,
            exclude_shift_ids=exclude_shift_ids,
            status=shift.status,
            catalog=self.catalog,
        ):
            logger.debug(
                "Edit rejected for %s on %s: %s-%s overlaps another shift",
                employee_id,
                shift.date,
                start_time,
                end_time,
            )
            return GestureResult(REJECTED, shift, "Time range already has a shift")
        return None

    def delete_shift(self, employee_id: str, shift_id: str) -> GestureResult:
        """
        Delete a shift, or its whole day-crossing group if it belongs to one.
        """
        if not self.is_idle:
            return GestureResult(IGNORED, reason="A gesture is in progress")

        employee = self.roster.find_employee(employee_id)
        shift = employee.get_shift(shift_id) if employee is not None else None
        if shift is None:
            return GestureResult(IGNORED, reason="Shift not found")

        group = find_day_crossing_group(employee, shift)
        if len(group) > 1:
            self.delete_multiple_shifts(
                employee_id, [member.id for member in group if member.id is not None]
            )
            if shift.series_id:
                self.roster.series.pop(shift.series_id, None)
        else:
            self.delete_shift_fn(employee_id, shift_id)

        self.has_unsaved_changes = True
        return GestureResult(COMMITTED, shift)

    # ------------------------------------------------------------------
    # Unsaved-changes flag

    def mark_changed(self) -> None:
        """Record a committed change made outside this object, e.g. a bulk run."""
        self.has_unsaved_changes = True

    def mark_saved(self) -> None:
        """The owning page has persisted everything."""
        self.has_unsaved_changes = False

    def _transition(self, new_state: InteractionState) -> None:
        logger.debug("%s -> %s", type(self.state).__name__, type(new_state).__name__)
        self.state = new_state
        if self.on_state_change is not None:
            self.on_state_change(new_state)
