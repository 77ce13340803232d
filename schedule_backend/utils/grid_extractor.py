"""
Course block extraction from the faculty timetable sheet.

Sheet conventions (see TimetableLayout):
- column A carries the Arabic day name on the row where a day starts
- columns C..J are the eight 45-minute slots
- every course block is 3 rows high and 1..4 columns wide
    row 1: course code + group(s), sometimes a room   "EEC 12305,06" / "EEC 11302 C401"
    row 2: Arabic course name
    row 3: room and/or instructor
"""
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from schedule_backend.schemas.extraction import (
    CourseGroup,
    ExtractionResult,
    ParsingSummary,
    ScheduleEntry,
    SessionOut,
    SpanInconsistency,
    SpanStatistics,
)
from schedule_backend.utils.cell_patterns import (
    ROOM_RE,
    find_room,
    looks_like_course_name,
    pad_group,
    parse_course_cell,
    starts_course_block,
)
from schedule_backend.utils.timeslots import DEFAULT_LAYOUT, TimeSlot, TimetableLayout

logger = logging.getLogger("schedule_backend.extractor")

RawGrid = List[List[str]]
SessionTypePolicy = Callable[[Sequence[str]], str]


class GridFormatError(ValueError):
    """The input is not a usable grid at all (not rows of cells, or empty)."""


def co_taught_lecture_policy(groups: Sequence[str]) -> str:
    """
    Heuristic only: a block listing several groups is a co-taught lecture,
    a single-group block is a lab. Co-taught labs exist and get mislabelled.
    """
    return "lecture" if len(groups) > 1 else "lab"


@dataclass
class CourseBlockInfo:
    course_code: str
    groups: Tuple[str, ...]
    course_name: str
    room: str
    instructor: str
    span: int
    start_row: int
    start_col: int


@dataclass
class _ScanState:
    processed: Set[Tuple[int, int]] = field(default_factory=set)
    course_spans: Dict[str, Set[int]] = field(default_factory=dict)

    def mark_block(self, row: int, col: int, span: int, rows: int) -> None:
        for r in range(row, row + rows):
            for c in range(col, col + span):
                self.processed.add((r, c))

    def track_span(self, course_code: str, span: int) -> None:
        self.course_spans.setdefault(course_code, set()).add(span)


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            value = int(value)
    s = str(value).strip()
    return "" if s.lower() == "nan" else s


def normalize_grid(raw_grid) -> RawGrid:
    """
    list of row sequences -> list of list[str]
    raises GridFormatError for anything that is not rows of cells
    """
    if raw_grid is None or isinstance(raw_grid, (str, bytes, dict)):
        raise GridFormatError("Grid must be a list of rows")
    try:
        rows = list(raw_grid)
    except TypeError:
        raise GridFormatError("Grid must be a list of rows")
    if not rows:
        raise GridFormatError("Grid is empty")

    grid: RawGrid = []
    for i, row in enumerate(rows):
        if row is None or isinstance(row, (str, bytes, dict)):
            raise GridFormatError(f"Row {i} is not a sequence of cells")
        try:
            grid.append([_cell_text(v) for v in row])
        except TypeError:
            raise GridFormatError(f"Row {i} is not a sequence of cells")
    return grid


def _at(grid: RawGrid, row: int, col: int) -> str:
    if row < 0 or row >= len(grid):
        return ""
    cells = grid[row]
    if col < 0 or col >= len(cells):
        return ""
    return cells[col]


class GridBlockExtractor:
    """
    Stateless between calls: all scan bookkeeping lives in a _ScanState made
    inside extract(), so one extractor can be shared freely.
    """

    def __init__(
        self,
        layout: TimetableLayout = DEFAULT_LAYOUT,
        session_type_policy: SessionTypePolicy = co_taught_lecture_policy,
    ):
        self.layout = layout
        self.session_type_policy = session_type_policy

    # ---------- public ----------
    def extract(self, raw_grid) -> ExtractionResult:
        grid = normalize_grid(raw_grid)
        state = _ScanState()

        entries = self.detect_all_blocks(grid, state)
        groups = group_by_course_group(entries)
        inconsistencies = span_inconsistencies(state)
        for item in inconsistencies:
            logger.warning(
                "Course %s observed with different spans: %s",
                item.course_code, ", ".join(str(s) for s in item.spans),
            )

        logger.info(
            "Extracted %d entries, %d course groups from %d rows",
            len(entries), len(groups), len(grid),
        )
        return ExtractionResult(
            schedule_entries=entries,
            course_groups=groups,
            span_statistics=span_statistics(state),
            span_inconsistencies=inconsistencies,
            parsing_summary=parsing_summary(entries),
        )

    # ---------- scanning ----------
    def detect_all_blocks(self, grid: RawGrid, state: _ScanState) -> List[ScheduleEntry]:
        entries: List[ScheduleEntry] = []
        current_day: Optional[str] = None

        for row_idx in range(len(grid)):
            day = self.layout.day_from_label(_at(grid, row_idx, self.layout.day_col))
            if day:
                current_day = day
                logger.debug("Day %s starts at row %d", day, row_idx)
                continue
            if current_day is None:
                continue

            for slot in self.layout.time_slots:
                col = self.layout.column_of(slot)
                if (row_idx, col) in state.processed:
                    continue
                block = self.detect_block(grid, row_idx, col)
                if block is None:
                    continue

                state.mark_block(row_idx, col, block.span, self.layout.block_rows)
                state.track_span(block.course_code, block.span)
                entries.extend(self.create_entries(block, current_day, slot))
                logger.debug(
                    "Block at (%d,%d): %s groups=%s span=%d",
                    row_idx, col, block.course_code, ",".join(block.groups), block.span,
                )
        return entries

    def detect_block(self, grid: RawGrid, row: int, col: int) -> Optional[CourseBlockInfo]:
        text = _at(grid, row, col)
        parsed = parse_course_cell(text)
        if parsed is None or not parsed.groups:
            return None

        span = self.horizontal_span(grid, row, col)
        name = self.course_name(grid, row + 1, col, span)
        room, instructor = self.room_and_instructor(grid, row + 2, col, span, text)
        return CourseBlockInfo(
            course_code=parsed.course_code,
            groups=tuple(pad_group(g) for g in parsed.groups),
            course_name=name,
            room=parsed.room or room,
            instructor=instructor,
            span=span,
            start_row=row,
            start_col=col,
        )

    def horizontal_span(self, grid: RawGrid, row: int, col: int) -> int:
        """
        Columns to the right belong to the block while they are empty, a room,
        instructor text or any other non-course text. The next course code
        ends the block; so do the end of the row and the last slot column.
        """
        span = 1
        cells = grid[row]
        for offset in range(1, self.layout.max_lookahead + 1):
            check_col = col + offset
            if check_col >= len(cells) or check_col > self.layout.last_slot_col:
                break
            text = cells[check_col]
            if text and starts_course_block(text):
                break
            span += 1
        return span

    def course_name(self, grid: RawGrid, row: int, col: int, span: int) -> str:
        for c in range(col, col + span):
            text = _at(grid, row, c)
            if looks_like_course_name(text):
                return text
        return ""

    def room_and_instructor(self, grid: RawGrid, row: int, col: int, span: int, first_cell: str) -> Tuple[str, str]:
        room = find_room(first_cell)
        instructor = ""
        for c in range(col, col + span):
            text = _at(grid, row, c)
            if not text:
                continue
            if not room:
                room = find_room(text)
            if instructor or starts_course_block(text):
                continue
            # "C501 د. أحمد": the room goes to room, the rest is the instructor
            rest = ROOM_RE.sub("", text).strip(" -")
            if rest:
                instructor = rest
        return room, instructor

    def create_entries(self, block: CourseBlockInfo, day: str, slot: TimeSlot) -> List[ScheduleEntry]:
        session_type = self.session_type_policy(block.groups)
        shared = sorted(block.groups) if len(block.groups) > 1 else []
        return [
            ScheduleEntry(
                course_code=block.course_code,
                group_code=group,
                course_name=block.course_name,
                instructor=block.instructor,
                location=block.room,
                day_of_week=day,
                start_time=slot.start,
                end_time=slot.end,
                session_type=session_type,
                time_slot=slot.index,
                span=block.span,
                shared_groups=list(shared),
            )
            for group in block.groups
        ]


# ---------- aggregation / reports ----------
def group_by_course_group(entries: Sequence[ScheduleEntry]) -> List[CourseGroup]:
    """Entries -> one CourseGroup per (course_code, group_code), first-seen order."""
    groups: Dict[Tuple[str, str], CourseGroup] = {}
    for e in entries:
        key = (e.course_code, e.group_code)
        group = groups.get(key)
        if group is None:
            group = CourseGroup(
                course_code=e.course_code,
                group_code=e.group_code,
                course_name=e.course_name,
                sessions=[],
            )
            groups[key] = group
        if not group.course_name and e.course_name:
            group.course_name = e.course_name
        group.sessions.append(
            SessionOut(
                day_of_week=e.day_of_week,
                start_time=e.start_time,
                end_time=e.end_time,
                location=e.location,
                instructor=e.instructor,
                session_type=e.session_type,
                time_slot=e.time_slot,
                span=e.span,
                shared_groups=list(e.shared_groups),
            )
        )
    return list(groups.values())


def span_inconsistencies(state: _ScanState) -> List[SpanInconsistency]:
    return [
        SpanInconsistency(course_code=code, spans=sorted(spans))
        for code, spans in state.course_spans.items()
        if len(spans) > 1
    ]


def span_statistics(state: _ScanState) -> SpanStatistics:
    distribution: Counter = Counter()
    consistent = 0
    for spans in state.course_spans.values():
        if len(spans) == 1:
            consistent += 1
        distribution.update(spans)
    return SpanStatistics(
        total_courses=len(state.course_spans),
        consistent_courses=consistent,
        inconsistent_courses=len(state.course_spans) - consistent,
        span_distribution=dict(sorted(distribution.items())),
    )


def parsing_summary(entries: Sequence[ScheduleEntry]) -> ParsingSummary:
    return ParsingSummary(
        total_entries=len(entries),
        course_codes_found=len({e.course_code for e in entries}),
        groups_found=len({(e.course_code, e.group_code) for e in entries}),
        with_course_names=sum(1 for e in entries if e.course_name),
        with_rooms=sum(1 for e in entries if e.location),
        with_instructors=sum(1 for e in entries if e.instructor),
        shared_group_entries=sum(1 for e in entries if e.shared_groups),
    )
