"""
Shift mutation entry points.

The engine never persists anything itself; it calls the four methods of a
ShiftStore (or any callables with the same signatures). InMemoryShiftStore
is the reference implementation used by the CLI and the tests.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, Set

from .models import EmployeeShift, Roster


def generate_shift_id() -> str:
    return f"shift-{uuid.uuid4().hex[:12]}"


class ShiftStore(ABC):
    """Abstract base class for the add/update/delete collaborators."""

    @abstractmethod
    def add_shift(self, employee_id: str, shift: EmployeeShift) -> EmployeeShift:
        """Store a new shift, allocating its id.

        Args:
            employee_id: Owner of the shift
            shift: Shift without an id

        Returns:
            The stored shift, with its id set
        """
        pass

    @abstractmethod
    def update_shift(self, employee_id: str, shift: EmployeeShift) -> None:
        """Replace the stored shift that has the same id."""
        pass

    @abstractmethod
    def delete_shift(self, employee_id: str, shift_id: str) -> None:
        pass

    @abstractmethod
    def delete_multiple_shifts(self, employee_id: str, shift_ids: Iterable[str]) -> None:
        pass


class InMemoryShiftStore(ShiftStore):
    """Mutates the roster's shift lists in place and tracks unsaved ids."""

    def __init__(self, roster: Roster):
        self.roster = roster
        self.unsaved_shift_ids: Set[str] = set()

    def add_shift(self, employee_id: str, shift: EmployeeShift) -> EmployeeShift:
        employee = self._employee(employee_id)
        stored = replace(shift, id=generate_shift_id(), employee_id=employee_id)
        employee.shifts.append(stored)
        self.unsaved_shift_ids.add(stored.id)
        return stored

    def update_shift(self, employee_id: str, shift: EmployeeShift) -> None:
        employee = self._employee(employee_id)
        for index, existing in enumerate(employee.shifts):
            if existing.id == shift.id:
                employee.shifts[index] = shift
                self.unsaved_shift_ids.add(shift.id)
                return
        raise KeyError(f"Shift '{shift.id}' not found for employee '{employee_id}'")

    def delete_shift(self, employee_id: str, shift_id: str) -> None:
        self.delete_multiple_shifts(employee_id, [shift_id])

    def delete_multiple_shifts(self, employee_id: str, shift_ids: Iterable[str]) -> None:
        doomed = set(shift_ids)
        if not doomed:
            return
        employee = self._employee(employee_id)
        # Slice assignment keeps the list object callers already hold
        employee.shifts[:] = [s for s in employee.shifts if s.id not in doomed]
        self.unsaved_shift_ids -= doomed

    def mark_saved(self) -> None:
        """Forget unsaved ids once the owning page has persisted them."""
        self.unsaved_shift_ids.clear()

    def is_unsaved(self, shift_id: str) -> bool:
        return shift_id in self.unsaved_shift_ids

    def _employee(self, employee_id: str):
        employee = self.roster.find_employee(employee_id)
        if employee is None:
            raise KeyError(f"Employee '{employee_id}' not found")
        return employee
