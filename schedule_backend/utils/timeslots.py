from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class TimeSlot:
    index: int          # 1..8
    start: str          # "9.00"
    end: str            # "9.45"
    excel_col: str      # "C"

    @property
    def label(self) -> str:
        return f"{self.start} - {self.end}"


TIME_SLOTS: Tuple[TimeSlot, ...] = (
    TimeSlot(1, "9.00", "9.45", "C"),
    TimeSlot(2, "9.45", "10.30", "D"),
    TimeSlot(3, "10.40", "11.25", "E"),
    TimeSlot(4, "11.25", "12.10", "F"),
    TimeSlot(5, "12.20", "1.05", "G"),
    TimeSlot(6, "1.05", "1.50", "H"),
    TimeSlot(7, "2.00", "2.45", "I"),
    TimeSlot(8, "2.45", "3.30", "J"),
)

# Monday is spelled both ways in the sheets we get
ARABIC_DAYS: Mapping[str, str] = MappingProxyType({
    "السبت": "Saturday",
    "الأحد": "Sunday",
    "الاثنين": "Monday",
    "الإثنين": "Monday",
    "الثلاثاء": "Tuesday",
    "الأربعاء": "Wednesday",
    "الخميس": "Thursday",
    "الجمعة": "Friday",
})

WEEK_DAYS: Tuple[str, ...] = (
    "Saturday", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday",
)


@dataclass(frozen=True)
class TimetableLayout:
    """
    Fixed geometry of the faculty timetable sheet.

    - column 0: day label (only on the row where a new day starts)
    - columns first_slot_col .. first_slot_col+7: the eight 45-minute slots
    - a course block is block_rows rows high

    Extractor and assembler both read slots from here, so the labels written
    by one are always the labels looked up by the other.
    """
    time_slots: Tuple[TimeSlot, ...] = TIME_SLOTS
    days: Tuple[str, ...] = WEEK_DAYS
    arabic_days: Mapping[str, str] = field(default_factory=lambda: ARABIC_DAYS, hash=False)
    day_col: int = 0
    first_slot_col: int = 2
    block_rows: int = 3
    max_lookahead: int = 3

    @property
    def slot_count(self) -> int:
        return len(self.time_slots)

    @property
    def last_slot_col(self) -> int:
        return self.first_slot_col + self.slot_count - 1

    def column_of(self, slot: TimeSlot) -> int:
        return self.first_slot_col + slot.index - 1

    def slot_index(self, start_time: Optional[str]) -> Optional[int]:
        """
        "10.40" -> 2 (0-based position in the week table)
        unknown start -> None
        """
        key = (start_time or "").strip()
        for pos, slot in enumerate(self.time_slots):
            if slot.start == key:
                return pos
        return None

    def day_from_label(self, text: Optional[str]) -> Optional[str]:
        """Arabic day label (may carry extra text around it) -> English day."""
        text = (text or "").strip()
        if not text:
            return None
        for arabic, english in self.arabic_days.items():
            if arabic in text:
                return english
        return None

    def day_index(self, day: Optional[str]) -> Optional[int]:
        try:
            return self.days.index(day)
        except ValueError:
            return None

    def slot_labels(self) -> list:
        return [s.label for s in self.time_slots]


DEFAULT_LAYOUT = TimetableLayout()


def slots_to_range(start_slot: int, span: int, slot_count: int = len(TIME_SLOTS)) -> Tuple[int, int]:
    """
    (3, 2) -> (3, 4)
    inclusive 1-based slot range, clipped to the last slot of the day
    """
    end = min(start_slot + max(span, 1) - 1, slot_count)
    return start_slot, end
