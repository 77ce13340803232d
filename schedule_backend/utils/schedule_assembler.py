"""
Personalized weekly schedule: the user's course list + the parsed catalog ->
a 7-day x 8-slot table of 3-line course blocks, with span and conflict reports.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from schedule_backend.schemas.extraction import CourseGroup, SessionOut
from schedule_backend.schemas.schedule import (
    AssemblyResult,
    Conflict,
    ConflictValidation,
    CourseBlock,
    CourseChoice,
    CourseInfoRow,
    CourseNameRow,
    CourseSelection,
    CourseSpanSummary,
    DetailsRow,
    GenerationMetadata,
    GroupConflictReport,
    GroupValidationOut,
    InternalConflict,
    PersonalizedSchedule,
    ScheduleRequest,
    SessionMetadata,
    SpanValidation,
    TableStructure,
    WeeklyTable,
)
from schedule_backend.utils.canonical_spans import BUILTIN_SPANS, expected_totals
from schedule_backend.utils.cell_patterns import normalize_course_code, pad_group, parse_selection_text
from schedule_backend.utils.conflict import Placement, find_overlaps, overlap_length
from schedule_backend.utils.timeslots import DEFAULT_LAYOUT, TimetableLayout, slots_to_range

logger = logging.getLogger("schedule_backend.assembler")

DEFAULT_GROUP = "01"


def _as_course_groups(course_groups) -> List[CourseGroup]:
    return [
        g if isinstance(g, CourseGroup) else CourseGroup.model_validate(g)
        for g in (course_groups or [])
    ]


def session_key(course_code: str, s: SessionOut) -> Tuple[str, str, str, str, str]:
    return (course_code, s.day_of_week, s.start_time, s.end_time, s.session_type)


def select_smart_group(course_code: str, course_groups: Sequence[CourseGroup]) -> str:
    """
    "01" when the course has it, otherwise the lowest group code,
    "01" when the course has no groups at all (reported later as not found).
    """
    available = sorted({g.group_code for g in course_groups if g.course_code == course_code and g.group_code})
    if not available:
        logger.info("No groups found for %s, defaulting to %s", course_code, DEFAULT_GROUP)
        return DEFAULT_GROUP
    if DEFAULT_GROUP in available:
        return DEFAULT_GROUP
    logger.info("Group %s not available for %s, selected %s", DEFAULT_GROUP, course_code, available[0])
    return available[0]


def find_shared_groups(course_code: str, session: SessionOut, course_groups: Sequence[CourseGroup]) -> List[str]:
    """
    Every group of the same course holding the identical session
    (day, start, end, type). Fewer than two -> [] (not shared).
    """
    key = session_key(course_code, session)
    found = set()
    for g in course_groups:
        if g.course_code != course_code:
            continue
        if any(session_key(course_code, s) == key for s in g.sessions):
            found.add(g.group_code)
    return sorted(found) if len(found) > 1 else []


def calculate_group_spans(group: CourseGroup) -> int:
    return group.total_spans()


class ScheduleAssembler:

    def __init__(
        self,
        layout: TimetableLayout = DEFAULT_LAYOUT,
        true_spans: Optional[Mapping[str, int]] = None,
    ):
        self.layout = layout
        self.true_spans = true_spans if true_spans is not None else expected_totals(BUILTIN_SPANS)

    # ---------- public ----------
    def assemble(self, course_groups, request) -> AssemblyResult:
        catalog = _as_course_groups(course_groups)

        selection, input_errors = self.parse_user_selection(request, catalog)
        span_validation = self.validate_spans(selection, catalog)

        errors = input_errors + span_validation.errors
        if errors:
            logger.info("Schedule validation failed: %s", errors)
            return AssemblyResult(
                success=False,
                error="Course span validation failed",
                validation_errors=errors,
            )

        weekly_table, placements = self.build_weekly_table(selection, catalog)
        conflict_validation = self.validate_conflicts(placements)
        if conflict_validation.has_conflicts:
            logger.warning("Schedule has %d time conflict(s)", conflict_validation.total_conflicts)

        schedule = PersonalizedSchedule(
            weekly_table=weekly_table,
            course_selection=selection,
            span_validation=span_validation,
            conflict_validation=conflict_validation,
            generation_metadata=GenerationMetadata(
                timestamp=datetime.now(timezone.utc).isoformat(),
                total_courses=len(selection),
                total_spans=self.total_spans(weekly_table),
            ),
        )
        return AssemblyResult(success=True, schedule=schedule)

    # ---------- step 1: selection ----------
    def parse_user_selection(self, request, catalog: Sequence[CourseGroup]) -> Tuple[List[CourseSelection], List[str]]:
        """
        "EEC 101"      -> smart group
        "EEC 10105"    -> group 05
        {"code": "EEC 101", "group": "5"} -> group 05
        anything unusable -> an error message, never an exception
        """
        if isinstance(request, ScheduleRequest):
            items = request.desired_courses
        elif isinstance(request, dict):
            items = request.get("desired_courses") or []
        else:
            return [], ["Request must contain desired_courses"]
        if isinstance(items, (str, dict)) or not isinstance(items, (list, tuple)):
            return [], ["desired_courses must be a list"]

        selection: List[CourseSelection] = []
        errors: List[str] = []
        for item in items:
            original = item.model_dump() if isinstance(item, BaseModel) else item
            code, group = self._resolve_item(item)
            if not code:
                errors.append(f"Invalid course selection: {original!r}")
                continue
            if not group:
                group = select_smart_group(code, catalog)
            selection.append(CourseSelection(
                course_code=code,
                group_number=pad_group(group),
                original_input=original,
            ))
        return selection, errors

    def _resolve_item(self, item: Any) -> Tuple[Optional[str], Optional[str]]:
        if isinstance(item, str):
            if not item.strip():
                return None, None
            return parse_selection_text(item)

        if isinstance(item, CourseChoice):
            code, group = item.code, item.group
        elif isinstance(item, dict):
            code, group = item.get("code"), item.get("group")
        else:
            return None, None

        if not isinstance(code, str) or not code.strip():
            return None, None
        if group is not None and not isinstance(group, (str, int)):
            return None, None
        group = str(group).strip() if group is not None else ""
        # {"code": "EEC 10105"} carries its group inside the code
        parsed_code, embedded = parse_selection_text(code)
        return normalize_course_code(parsed_code), (group or embedded)

    # ---------- step 2: spans ----------
    def validate_spans(self, selection: Sequence[CourseSelection], catalog: Sequence[CourseGroup]) -> SpanValidation:
        validation = SpanValidation()
        for sel in selection:
            code, group_number = sel.course_code, sel.group_number
            of_course = [g for g in catalog if g.course_code == code]
            if not of_course:
                validation.is_valid = False
                validation.errors.append(f"Course {code} not found in Excel data")
                continue

            group = next((g for g in of_course if g.group_code == group_number), None)
            if group is None:
                validation.is_valid = False
                validation.errors.append(f"Group {group_number} not found for course {code}")
                continue

            actual = calculate_group_spans(group)
            expected = self.true_spans.get(code)
            # mismatch only warns, generation goes on
            if expected is not None and actual != expected:
                validation.warnings.append(
                    f"Course {code} group {group_number}: expected {expected} spans, found {actual} spans"
                )
            validation.course_span_summary.append(CourseSpanSummary(
                course_code=code,
                group_number=group_number,
                actual_spans=actual,
                expected_spans=expected,
                is_valid=expected is None or actual == expected,
            ))
        return validation

    # ---------- step 3: table ----------
    def empty_table(self) -> WeeklyTable:
        return WeeklyTable(
            structure=TableStructure(
                days=list(self.layout.days),
                time_slots=self.layout.slot_labels(),
                total_cells=len(self.layout.days) * self.layout.slot_count,
            ),
            schedule={day: [None] * self.layout.slot_count for day in self.layout.days},
        )

    def build_weekly_table(
        self, selection: Sequence[CourseSelection], catalog: Sequence[CourseGroup]
    ) -> Tuple[WeeklyTable, List[Placement]]:
        table = self.empty_table()
        placements: List[Placement] = []
        by_key: Dict[Tuple[str, str], CourseGroup] = {(g.course_code, g.group_code): g for g in catalog}

        for sel in selection:
            group = by_key.get((sel.course_code, sel.group_number))
            if group is None:
                continue
            for session in group.sessions:
                day_idx = self.layout.day_index(session.day_of_week)
                slot_idx = self.layout.slot_index(session.start_time)
                if day_idx is None or slot_idx is None:
                    logger.debug(
                        "Skipping session %s %s %s: unknown day or start time",
                        group.course_code, session.day_of_week, session.start_time,
                    )
                    continue

                block = self.create_course_block(session, group, catalog)
                row = table.schedule[session.day_of_week]
                for offset in range(session.span):
                    pos = slot_idx + offset
                    if pos >= self.layout.slot_count:
                        break
                    row[pos] = block.model_copy(update={
                        "is_continuation": offset > 0,
                        "span_position": offset + 1,
                        "total_span": session.span,
                    })

                start, end = slots_to_range(slot_idx + 1, session.span, self.layout.slot_count)
                placements.append(Placement(
                    day=session.day_of_week,
                    start_slot=start,
                    end_slot=end,
                    label=block.row1_course_info.display_text,
                    session_key=session_key(group.course_code, session),
                ))
        return table, placements

    def create_course_block(self, session: SessionOut, group: CourseGroup, catalog: Sequence[CourseGroup]) -> CourseBlock:
        shared = find_shared_groups(group.course_code, session, catalog)
        group_numbers = shared or [group.group_code]
        details = [p for p in (session.location, session.instructor) if p]
        return CourseBlock(
            row1_course_info=CourseInfoRow(
                course_code=group.course_code,
                group_numbers=group_numbers,
                display_text=f"{group.course_code} {','.join(group_numbers)}",
            ),
            row2_course_name=CourseNameRow(
                arabic_name=group.course_name or "",
                display_text=group.course_name or "",
            ),
            row3_details=DetailsRow(
                hall_number=session.location or "",
                professor_name=session.instructor or "",
                display_text=" - ".join(details),
            ),
            session_metadata=SessionMetadata(
                session_type=session.session_type,
                start_time=session.start_time,
                end_time=session.end_time,
                day_of_week=session.day_of_week,
                original_span=session.span,
            ),
            total_span=session.span,
        )

    # ---------- step 4: conflicts ----------
    def validate_conflicts(self, placements: Sequence[Placement]) -> ConflictValidation:
        conflicts = [
            Conflict(
                day=a.day,
                time_slot=max(a.start_slot, b.start_slot),
                course1=a.label,
                course2=b.label,
            )
            for a, b in find_overlaps(placements)
        ]
        return ConflictValidation(
            has_conflicts=bool(conflicts),
            conflicts=conflicts,
            total_conflicts=len(conflicts),
        )

    def total_spans(self, table: WeeklyTable) -> int:
        return sum(
            cell.total_span
            for cells in table.schedule.values()
            for cell in cells
            if cell is not None and not cell.is_continuation
        )

    # ---------- catalog check ----------
    def validate_course_groups(self, course_groups) -> GroupValidationOut:
        """Sessions of one course group that overlap each other."""
        reports = []
        for group in _as_course_groups(course_groups):
            placements = []
            for s in group.sessions:
                slot_idx = self.layout.slot_index(s.start_time)
                if slot_idx is None:
                    continue
                start, end = slots_to_range(slot_idx + 1, s.span, self.layout.slot_count)
                placements.append(Placement(s.day_of_week, start, end, f"{s.day_of_week}-{slot_idx + 1}"))

            found = [
                InternalConflict(session1=a.label, session2=b.label, overlap=overlap_length(a, b))
                for a, b in find_overlaps(placements)
            ]
            if found:
                reports.append(GroupConflictReport(
                    course_code=group.course_code,
                    group_code=group.group_code,
                    conflicts=found,
                ))
        return GroupValidationOut(valid=not reports, conflicts=reports)
