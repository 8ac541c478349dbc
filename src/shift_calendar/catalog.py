"""
The time slot catalog: a fixed, ordered grid of bookable intervals.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import TimeSlot


def parse_time_to_minutes(time_str: str) -> int:
    """Convert an "HH:MM" string to minutes since midnight."""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(total_minutes: int) -> str:
    """Convert minutes since midnight back to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def is_time_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Check if two time ranges overlap. Ranges that only touch do not."""
    return parse_time_to_minutes(start1) < parse_time_to_minutes(
        end2
    ) and parse_time_to_minutes(end1) > parse_time_to_minutes(start2)


class TimeSlotCatalog:
    """Immutable, ordered collection of TimeSlots.

    Built once from configuration and shared by reference; nothing mutates
    it after construction.
    """

    def __init__(self, slots: Iterable[TimeSlot]):
        self._slots: Tuple[TimeSlot, ...] = tuple(slots)
        self._by_id: Dict[str, TimeSlot] = {}
        for slot in self._slots:
            if slot.id in self._by_id:
                raise ValueError(f"Duplicate time slot id '{slot.id}'")
            self._by_id[slot.id] = slot

    @classmethod
    def hourly(cls, first_hour: int, last_hour: int) -> "TimeSlotCatalog":
        """Build a catalog of one-hour slots from first_hour to last_hour."""
        slots = []
        for hour in range(first_hour, last_hour):
            start = f"{hour:02d}:00"
            end = f"{hour + 1:02d}:00"
            slots.append(TimeSlot(id=start, label=f"{start}-{end}", start=start, end=end))
        return cls(slots)

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> TimeSlot:
        return self._slots[index]

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._by_id

    @property
    def slots(self) -> Tuple[TimeSlot, ...]:
        return self._slots

    @property
    def ids(self) -> List[str]:
        return [slot.id for slot in self._slots]

    def get(self, slot_id: Optional[str]) -> Optional[TimeSlot]:
        """Look up a slot by id; None if the id is unknown or empty."""
        if not slot_id:
            return None
        return self._by_id.get(slot_id)

    def index_of(self, slot_id: str) -> int:
        """Position of a slot in the grid, or -1 if unknown."""
        slot = self.get(slot_id)
        return self._slots.index(slot) if slot is not None else -1

    def slot_starting_at(self, time_str: str) -> Optional[TimeSlot]:
        for slot in self._slots:
            if slot.start == time_str:
                return slot
        return None

    def slot_ending_at(self, time_str: str) -> Optional[TimeSlot]:
        for slot in self._slots:
            if slot.end == time_str:
                return slot
        return None

    def time_range(self, slot_id: str) -> Optional[Tuple[str, str]]:
        """The (start, end) of a slot, or None if the id is unknown."""
        slot = self.get(slot_id)
        if slot is None:
            return None
        return slot.start, slot.end

    def slots_in_range(self, start: str, end: str) -> List[TimeSlot]:
        """Slots fully contained in [start, end).

        Fixed-width "HH:MM" strings compare correctly as text.
        """
        return [slot for slot in self._slots if slot.start >= start and slot.end <= end]

    def slot_ids_in_range(self, start: str, end: str) -> List[str]:
        return [slot.id for slot in self.slots_in_range(start, end)]


# Hourly grid from 08:00 to 21:00
DEFAULT_CATALOG = TimeSlotCatalog.hourly(8, 21)


def get_time_range_from_slot_id(
    slot_id: str, catalog: TimeSlotCatalog = DEFAULT_CATALOG
) -> Optional[Tuple[str, str]]:
    """Get the (start, end) of a time slot id, or None if it is not in the catalog."""
    return catalog.time_range(slot_id)
