"""Tests for the drag/resize interaction state machine."""

import pytest
from datetime import date

from shift_calendar.bulk import BulkAssigner, BulkAssignmentRequest
from shift_calendar.conflicts import FULL, check_duplicate
from shift_calendar.day_crossing import add_day_crossing_shift
from shift_calendar.interaction import (
    CANCELLED,
    COMMITTED,
    IGNORED,
    REJECTED,
    CalendarInteraction,
    Dragging,
    Idle,
    InteractionError,
    Resizing,
)
from shift_calendar.merge import build_shift_blocks, shifts_for_date
from shift_calendar.models import BarResizeState, DragState, Employee, EmployeeShift, Roster
from shift_calendar.store import InMemoryShiftStore

MONDAY = date(2025, 3, 10)


def afternoon_shift() -> EmployeeShift:
    return EmployeeShift(
        id="s-afternoon",
        employee_id="emp-yamada",
        date=MONDAY,
        time_slot="14:00",
        start_time="14:00",
        end_time="16:00",
    )


def block_bounds(employee: Employee) -> list[tuple[str, str]]:
    return [(b.start_time, b.end_time) for b in build_shift_blocks(employee, MONDAY)]


class TestDragToCreate:
    """Tests for creating a shift by dragging across empty cells."""

    def test_press_starts_drag(self, interaction: CalendarInteraction):
        assert interaction.press("emp-sato", MONDAY, "10:00")

        assert isinstance(interaction.state, Dragging)
        assert interaction.drag_state == DragState("emp-sato", "10:00", "10:00")
        assert interaction.bar_resize_state is None

    def test_drag_down_and_release_commits(
        self, interaction: CalendarInteraction, roster: Roster
    ):
        """Dragging 10:00 to 12:00 books one shift per slot, drawn as one block."""
        interaction.press("emp-sato", MONDAY, "10:00")
        interaction.enter("emp-sato", "12:00")
        assert interaction.preview_range() == ("10:00", "13:00")

        result = interaction.release("emp-sato", "12:00")

        assert result.outcome == COMMITTED
        assert len(result.shifts) == 3
        sato = roster.get_employee("emp-sato")
        assert [s.time_slot for s in sato.shifts] == ["10:00", "11:00", "12:00"]
        assert (sato.shifts[0].start_time, sato.shifts[0].end_time) == ("10:00", "11:00")
        assert all(s.is_working for s in sato.shifts)
        assert block_bounds(sato) == [("10:00", "13:00")]
        assert interaction.has_unsaved_changes
        assert interaction.is_idle

    def test_drag_upwards(self, interaction: CalendarInteraction, roster: Roster):
        """The range runs from the earlier slot whichever way the pointer moved."""
        interaction.press("emp-sato", MONDAY, "14:00")
        interaction.enter("emp-sato", "11:00")

        interaction.release("emp-sato", "11:00")

        assert block_bounds(roster.get_employee("emp-sato")) == [("11:00", "15:00")]

    def test_dragged_slots_are_seen_by_bulk_assignment(
        self, interaction: CalendarInteraction, roster: Roster, assigner: BulkAssigner
    ):
        """A later bulk run over a dragged range finds it fully booked."""
        interaction.press("emp-sato", MONDAY, "09:00")
        interaction.enter("emp-sato", "11:00")
        interaction.release("emp-sato", "11:00")

        assert check_duplicate(roster, "emp-sato", MONDAY, ["10:00", "11:00"]) == FULL

        result = assigner.assign(
            BulkAssignmentRequest(
                employee_id="emp-sato", dates=[MONDAY], start_time="10:00", end_time="12:00"
            )
        )

        assert (result.success_count, result.skip_count) == (0, 1)
        assert len(roster.get_employee("emp-sato").shifts) == 3

    def test_release_on_other_employee_cancels(
        self, interaction: CalendarInteraction, roster: Roster
    ):
        """A cancelled drag leaves both the shifts and the unsaved flag alone."""
        interaction.press("emp-sato", MONDAY, "10:00")
        interaction.enter("emp-sato", "12:00")

        result = interaction.release("emp-yamada", "12:00")

        assert result.outcome == CANCELLED
        assert roster.get_employee("emp-sato").shifts == []
        assert not interaction.has_unsaved_changes
        assert interaction.is_idle

    def test_release_outside_grid_cancels(self, interaction: CalendarInteraction):
        interaction.press("emp-sato", MONDAY, "10:00")
        assert interaction.release().outcome == CANCELLED
        assert not interaction.has_unsaved_changes

    def test_enter_other_employee_is_ignored(self, interaction: CalendarInteraction):
        interaction.press("emp-sato", MONDAY, "10:00")
        interaction.enter("emp-yamada", "15:00")
        assert interaction.drag_state.current_time == "10:00"

    def test_press_on_booked_cell_does_nothing(self, interaction: CalendarInteraction):
        """10:00 lies inside Yamada's 09:00-12:00 shift."""
        assert not interaction.press("emp-yamada", MONDAY, "10:00")
        assert interaction.is_idle

    def test_press_unknown_slot_or_employee(self, interaction: CalendarInteraction):
        assert not interaction.press("emp-sato", MONDAY, "07:00")
        assert not interaction.press("nobody", MONDAY, "10:00")

    def test_drag_over_existing_shift_is_rejected(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        interaction.press("emp-yamada", MONDAY, "12:00")
        interaction.enter("emp-yamada", "11:00")

        result = interaction.release("emp-yamada", "11:00")

        assert result.outcome == REJECTED
        assert [s.id for s in yamada.shifts] == ["s-morning"]
        assert not interaction.has_unsaved_changes
        assert interaction.is_idle

    def test_second_gesture_is_refused(self, interaction: CalendarInteraction):
        """Only one gesture can be active at a time."""
        interaction.press("emp-sato", MONDAY, "10:00")

        assert not interaction.press("emp-sato", MONDAY, "15:00")
        assert not interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        assert interaction.drag_state.start_time == "10:00"

    def test_release_when_idle_is_ignored(self, interaction: CalendarInteraction):
        assert interaction.release("emp-sato", "10:00").outcome == IGNORED
        assert interaction.cancel().outcome == IGNORED

    def test_state_change_callback(self, roster: Roster, store: InMemoryShiftStore):
        seen = []
        interaction = CalendarInteraction(
            roster,
            add_shift=store.add_shift,
            update_shift=store.update_shift,
            delete_shift=store.delete_shift,
            delete_multiple_shifts=store.delete_multiple_shifts,
            on_state_change=seen.append,
        )

        interaction.press("emp-sato", MONDAY, "10:00")
        interaction.release("emp-sato", "10:00")

        assert [type(state) for state in seen] == [Dragging, Dragging, Idle]


class TestBarResize:
    """Tests for stretching or shrinking a block by one edge."""

    def test_begin_resize(self, interaction: CalendarInteraction):
        assert interaction.begin_resize("emp-yamada", MONDAY, 0, "end")

        assert isinstance(interaction.state, Resizing)
        resize = interaction.bar_resize_state
        assert (resize.original_start_time, resize.original_end_time) == ("09:00", "12:00")
        assert resize.current_time == "12:00"

    def test_invalid_direction_raises_error(self, interaction: CalendarInteraction):
        with pytest.raises(InteractionError, match="direction"):
            interaction.begin_resize("emp-yamada", MONDAY, 0, "middle")

    def test_invalid_block_index(self, interaction: CalendarInteraction):
        assert not interaction.begin_resize("emp-yamada", MONDAY, 1, "end")
        assert not interaction.begin_resize("emp-sato", MONDAY, 0, "end")
        assert interaction.is_idle

    def test_extend_end(self, interaction: CalendarInteraction, yamada: Employee):
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "13:00")
        assert interaction.preview_range() == ("09:00", "14:00")

        result = interaction.end_resize()

        assert result.outcome == COMMITTED
        assert block_bounds(yamada) == [("09:00", "14:00")]
        assert [s.time_slot for s in result.shifts] == [
            "09:00", "10:00", "11:00", "12:00", "13:00",
        ]
        shift = yamada.get_shift("s-morning")
        assert (shift.start_time, shift.end_time) == ("09:00", "10:00")
        assert interaction.has_unsaved_changes
        assert interaction.is_idle

    def test_extended_slots_are_seen_as_booked(
        self, interaction: CalendarInteraction, roster: Roster
    ):
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "13:00")
        interaction.end_resize()

        assert check_duplicate(roster, "emp-yamada", MONDAY, ["12:00", "13:00"]) == FULL

    def test_shrink_start(self, interaction: CalendarInteraction, yamada: Employee):
        interaction.begin_resize("emp-yamada", MONDAY, 0, "start")
        interaction.enter("emp-yamada", "11:00")

        result = interaction.release("emp-yamada", "11:00")

        assert result.outcome == COMMITTED
        shift = yamada.get_shift("s-morning")
        assert (shift.start_time, shift.end_time) == ("11:00", "12:00")
        assert shift.time_slot == "11:00"

    def test_edge_cannot_cross_the_other_edge(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        """Moving the start onto or past the end is ignored, so nothing changes."""
        interaction.begin_resize("emp-yamada", MONDAY, 0, "start")
        interaction.enter("emp-yamada", "12:00")
        interaction.enter("emp-yamada", "15:00")

        result = interaction.end_resize()

        assert result.outcome == CANCELLED
        assert yamada.get_shift("s-morning").end_time == "12:00"
        assert not interaction.has_unsaved_changes

    def test_crossed_bounds_are_rejected(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        """A resize that ends where it starts fails validation and changes nothing."""
        interaction.state = Resizing(
            BarResizeState("emp-yamada", 0, "end", "09:00", "12:00", "09:00"), MONDAY
        )

        result = interaction.end_resize()

        assert result.outcome == REJECTED
        shift = yamada.get_shift("s-morning")
        assert (shift.start_time, shift.end_time) == ("09:00", "12:00")
        assert len(yamada.shifts) == 1
        assert not interaction.has_unsaved_changes
        assert interaction.is_idle

    def test_end_edge_cannot_cross_start(self, interaction: CalendarInteraction):
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "08:00")
        assert interaction.bar_resize_state.current_time == "12:00"

    def test_resize_into_other_shift_is_rejected(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        yamada.shifts.append(afternoon_shift())
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "14:00")

        result = interaction.end_resize()

        assert result.outcome == REJECTED
        assert yamada.get_shift("s-morning").end_time == "12:00"
        assert len(yamada.shifts) == 2
        assert not interaction.has_unsaved_changes

    def test_resize_up_to_neighbour_merges(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        """Touching a same-status block after the resize joins the two."""
        yamada.shifts.append(afternoon_shift())
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "13:00")

        result = interaction.end_resize()

        assert result.outcome == COMMITTED
        ids = [s.id for s in yamada.shifts]
        assert "s-morning" in ids
        assert "s-afternoon" not in ids
        assert len(ids) == 7
        assert block_bounds(yamada) == [("09:00", "16:00")]

    def test_multi_shift_block_is_rewritten_per_slot(self, roster: Roster, interaction: CalendarInteraction):
        """A block of slot shifts is rewritten slot by slot under its first id."""
        sato = roster.get_employee("emp-sato")
        for slot_id in ("09:00", "10:00", "11:00"):
            sato.shifts.append(
                EmployeeShift(
                    id=f"s-{slot_id}", employee_id="emp-sato", date=MONDAY, time_slot=slot_id
                )
            )

        interaction.begin_resize("emp-sato", MONDAY, 0, "end")
        interaction.enter("emp-sato", "13:00")
        result = interaction.end_resize()

        assert result.outcome == COMMITTED
        ids = [s.id for s in sato.shifts]
        assert "s-09:00" in ids
        assert "s-10:00" not in ids and "s-11:00" not in ids
        assert len(ids) == 5
        assert block_bounds(sato) == [("09:00", "14:00")]

    def test_cancel_resize(self, interaction: CalendarInteraction, yamada: Employee):
        interaction.begin_resize("emp-yamada", MONDAY, 0, "end")
        interaction.enter("emp-yamada", "15:00")

        assert interaction.cancel().outcome == CANCELLED
        assert yamada.get_shift("s-morning").end_time == "12:00"
        assert interaction.is_idle

    def test_end_resize_when_idle(self, interaction: CalendarInteraction):
        assert interaction.end_resize().outcome == IGNORED


class TestDirectEdits:
    """Tests for edits made outside of a gesture."""

    def test_add_single_shift(self, interaction: CalendarInteraction, roster: Roster):
        shift = EmployeeShift(
            employee_id="emp-sato", date=MONDAY, start_time="13:00", end_time="15:00"
        )

        assert interaction.add_single_shift("emp-sato", shift).committed
        assert len(roster.get_employee("emp-sato").shifts) == 1
        assert interaction.has_unsaved_changes

    def test_invalid_duration_is_rejected(self, interaction: CalendarInteraction):
        shift = EmployeeShift(
            employee_id="emp-sato", date=MONDAY, start_time="15:00", end_time="13:00"
        )

        result = interaction.add_single_shift("emp-sato", shift)

        assert result.outcome == REJECTED
        assert not interaction.has_unsaved_changes

    def test_add_over_existing_shift_is_rejected(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        """10:00-11:00 lies inside Yamada's morning shift."""
        shift = EmployeeShift(
            employee_id="emp-yamada", date=MONDAY, start_time="10:00", end_time="11:00"
        )

        result = interaction.add_single_shift("emp-yamada", shift)

        assert result.outcome == REJECTED
        assert [s.id for s in yamada.shifts] == ["s-morning"]
        assert not interaction.has_unsaved_changes

    def test_add_next_to_existing_shift(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        """Touching bounds are not an overlap."""
        shift = EmployeeShift(
            employee_id="emp-yamada", date=MONDAY, start_time="12:00", end_time="13:00"
        )

        assert interaction.add_single_shift("emp-yamada", shift).committed
        assert len(yamada.shifts) == 2

    def test_edit_shift(self, interaction: CalendarInteraction, yamada: Employee):
        edited = EmployeeShift(
            id="s-morning", employee_id="emp-yamada", date=MONDAY,
            start_time="08:00", end_time="12:00", notes="Early",
        )

        assert interaction.edit_shift("emp-yamada", edited).committed
        assert yamada.get_shift("s-morning").notes == "Early"

    def test_edit_onto_other_shift_is_rejected(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        yamada.shifts.append(afternoon_shift())
        edited = EmployeeShift(
            id="s-afternoon", employee_id="emp-yamada", date=MONDAY,
            start_time="11:00", end_time="16:00",
        )

        result = interaction.edit_shift("emp-yamada", edited)

        assert result.outcome == REJECTED
        assert yamada.get_shift("s-afternoon").start_time == "14:00"
        assert not interaction.has_unsaved_changes

    def test_delete_shift(self, interaction: CalendarInteraction, yamada: Employee):
        result = interaction.delete_shift("emp-yamada", "s-morning")

        assert result.committed
        assert yamada.shifts == []
        assert interaction.has_unsaved_changes

    def test_delete_day_crossing_shift_removes_group(
        self, interaction: CalendarInteraction, roster: Roster, store: InMemoryShiftStore
    ):
        """Deleting any day of a multi-day shift deletes every day."""
        series = add_day_crossing_shift(
            roster, store.add_shift, "emp-sato", MONDAY, date(2025, 3, 12),
            "22:00", "06:00", "Night move",
        )
        sato = roster.get_employee("emp-sato")
        middle = shifts_for_date(sato, date(2025, 3, 11))[0]

        interaction.delete_shift("emp-sato", middle.id)

        assert sato.shifts == []
        assert series.id not in roster.series

    def test_delete_during_gesture_is_ignored(
        self, interaction: CalendarInteraction, yamada: Employee
    ):
        interaction.press("emp-sato", MONDAY, "10:00")

        assert interaction.delete_shift("emp-yamada", "s-morning").outcome == IGNORED
        assert len(yamada.shifts) == 1

    def test_delete_unknown_shift_is_ignored(self, interaction: CalendarInteraction):
        assert interaction.delete_shift("emp-yamada", "nope").outcome == IGNORED
        assert not interaction.has_unsaved_changes


class TestUnsavedChanges:
    def test_mark_saved_clears_flag(self, interaction: CalendarInteraction):
        interaction.press("emp-sato", MONDAY, "10:00")
        interaction.release("emp-sato", "10:00")
        assert interaction.has_unsaved_changes

        interaction.mark_saved()

        assert not interaction.has_unsaved_changes

    def test_mark_changed(self, interaction: CalendarInteraction):
        interaction.mark_changed()
        assert interaction.has_unsaved_changes
