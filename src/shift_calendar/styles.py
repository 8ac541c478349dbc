"""
Presentation tokens for shift bars and calendar cells.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable

from .models import UNAVAILABLE, WORKING, EmployeeShift

MIXED = "mixed"
EMPTY = "none"


@dataclass(frozen=True)
class ShiftVisualStyle:
    """Style tokens for one status; the view layer maps them to pixels."""

    status: str
    background: str
    text: str
    border: str
    is_unsaved: bool = False


_BASE_STYLES: Dict[str, ShiftVisualStyle] = {
    WORKING: ShiftVisualStyle(WORKING, "bg-blue-100", "text-blue-800", "border-blue-300"),
    UNAVAILABLE: ShiftVisualStyle(
        UNAVAILABLE, "bg-red-100", "text-red-800", "border-red-300"
    ),
    MIXED: ShiftVisualStyle(MIXED, "bg-purple-100", "text-purple-800", "border-purple-300"),
    EMPTY: ShiftVisualStyle(EMPTY, "bg-gray-50", "text-gray-400", "border-gray-200"),
}

UNSAVED_BORDER = "border-yellow-400 border-2"


def get_shift_visual_style(status: str, is_unsaved: bool) -> ShiftVisualStyle:
    """
    Get the style tokens for a status.

    Unsaved edits keep the status colors and only swap the border.
    Unknown statuses are drawn like an empty cell.
    """
    style = _BASE_STYLES.get(status, _BASE_STYLES[EMPTY])
    if is_unsaved:
        return replace(style, border=UNSAVED_BORDER, is_unsaved=True)
    return style


def cell_status(shifts: Iterable[EmployeeShift]) -> str:
    """Summarize the statuses in a calendar cell."""
    statuses = {shift.status for shift in shifts}
    if not statuses:
        return EMPTY
    if len(statuses) > 1:
        return MIXED
    return statuses.pop()
