"""Shared fixtures for shift-calendar tests."""

import pytest
from datetime import date

from shift_calendar.bulk import BulkAssigner
from shift_calendar.interaction import CalendarInteraction
from shift_calendar.models import (
    Employee,
    EmployeeShift,
    Roster,
    ShiftTemplate,
)
from shift_calendar.store import InMemoryShiftStore

MONDAY = date(2025, 3, 10)


@pytest.fixture
def yamada() -> Employee:
    """Employee with a 09:00-12:00 working shift on Monday 2025-03-10."""
    return Employee(
        id="emp-yamada",
        name="Yamada",
        position="driver",
        shifts=[
            EmployeeShift(
                id="s-morning",
                employee_id="emp-yamada",
                date=MONDAY,
                time_slot="09:00",
                start_time="09:00",
                end_time="12:00",
                notes="Morning move",
            )
        ],
    )


@pytest.fixture
def sato() -> Employee:
    """Employee with no shifts."""
    return Employee(id="emp-sato", name="Sato", position="loader")


@pytest.fixture
def day_template() -> ShiftTemplate:
    """09:00-17:00 on weekdays for Sato."""
    return ShiftTemplate(
        id="tpl-day",
        name="Day shift",
        employee_id="emp-sato",
        start_time="09:00",
        end_time="17:00",
        weekdays=["mon", "tue", "wed", "thu", "fri"],
        notes="Regular",
    )


@pytest.fixture
def roster(yamada: Employee, sato: Employee, day_template: ShiftTemplate) -> Roster:
    return Roster(employees=[yamada, sato], templates=[day_template])


@pytest.fixture
def store(roster: Roster) -> InMemoryShiftStore:
    return InMemoryShiftStore(roster)


@pytest.fixture
def assigner(roster: Roster, store: InMemoryShiftStore) -> BulkAssigner:
    return BulkAssigner(roster, store.add_shift, store.delete_multiple_shifts)


@pytest.fixture
def interaction(roster: Roster, store: InMemoryShiftStore) -> CalendarInteraction:
    return CalendarInteraction(
        roster,
        add_shift=store.add_shift,
        update_shift=store.update_shift,
        delete_shift=store.delete_shift,
        delete_multiple_shifts=store.delete_multiple_shifts,
    )
