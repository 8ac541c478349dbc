"""
Shift Calendar - Employee shift-scheduling engine: time blocks, bulk
assignment, day-crossing shifts and drag/resize editing.
"""

__version__ = "0.1.0"

from .bulk import BulkAssigner, BulkAssignmentRequest, BulkAssignmentResult
from .catalog import DEFAULT_CATALOG, TimeSlotCatalog, get_time_range_from_slot_id
from .clipboard import ShiftClipboard
from .config import (
    ConfigLoader,
    ConfigurationError,
    InvalidDateFormatError,
    InvalidTimeFormatError,
)
from .conflicts import check_duplicate, check_shift_overlap
from .day_crossing import (
    get_related_day_crossing_shifts,
    get_series_shifts,
    strip_day_crossing_tag,
)
from .interaction import CalendarInteraction, Dragging, Idle, Resizing
from .merge import build_shift_blocks, needs_merging
from .models import (
    BarResizeState,
    DayCrossingSeries,
    DragState,
    Employee,
    EmployeeShift,
    Roster,
    ShiftTemplate,
    TimeSlot,
)
from .reporter import RosterReporter
from .resolver import is_valid_shift_duration, resolve_shift_time_range
from .store import InMemoryShiftStore, ShiftStore
from .styles import get_shift_visual_style

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "InvalidDateFormatError",
    "InvalidTimeFormatError",
    "TimeSlot",
    "TimeSlotCatalog",
    "DEFAULT_CATALOG",
    "Employee",
    "EmployeeShift",
    "ShiftTemplate",
    "Roster",
    "DayCrossingSeries",
    "DragState",
    "BarResizeState",
    "resolve_shift_time_range",
    "is_valid_shift_duration",
    "get_time_range_from_slot_id",
    "strip_day_crossing_tag",
    "get_related_day_crossing_shifts",
    "get_series_shifts",
    "needs_merging",
    "build_shift_blocks",
    "check_duplicate",
    "check_shift_overlap",
    "get_shift_visual_style",
    "BulkAssigner",
    "BulkAssignmentRequest",
    "BulkAssignmentResult",
    "CalendarInteraction",
    "Idle",
    "Dragging",
    "Resizing",
    "ShiftClipboard",
    "ShiftStore",
    "InMemoryShiftStore",
    "RosterReporter",
]
