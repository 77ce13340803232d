from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from schedule_backend.schemas.extraction import CourseGroup


class CourseChoice(BaseModel):
    code: str
    group: Optional[Union[str, int]] = None


class ScheduleRequest(BaseModel):
    desired_courses: List[Union[str, CourseChoice, Any]] = Field(default_factory=list)


class CourseSelection(BaseModel):
    course_code: str
    group_number: str
    original_input: Any = None


class CourseInfoRow(BaseModel):
    course_code: str
    group_numbers: List[str]
    display_text: str


class CourseNameRow(BaseModel):
    arabic_name: str = ""
    display_text: str = ""


class DetailsRow(BaseModel):
    hall_number: str = ""
    professor_name: str = ""
    display_text: str = ""


class SessionMetadata(BaseModel):
    session_type: str
    start_time: str
    end_time: str
    day_of_week: str
    original_span: int


class CourseBlock(BaseModel):
    row1_course_info: CourseInfoRow
    row2_course_name: CourseNameRow
    row3_details: DetailsRow
    session_metadata: SessionMetadata
    is_continuation: bool = False
    span_position: int = 1
    total_span: int = 1

    def display_lines(self) -> List[str]:
        return [
            self.row1_course_info.display_text,
            self.row2_course_name.display_text,
            self.row3_details.display_text,
        ]


class TableStructure(BaseModel):
    days: List[str]
    time_slots: List[str]
    total_cells: int


class WeeklyTable(BaseModel):
    structure: TableStructure
    schedule: Dict[str, List[Optional[CourseBlock]]]


class CourseSpanSummary(BaseModel):
    course_code: str
    group_number: str
    actual_spans: int
    expected_spans: Optional[int] = None
    is_valid: bool


class SpanValidation(BaseModel):
    is_valid: bool = True
    errors: List[str] = []
    warnings: List[str] = []
    course_span_summary: List[CourseSpanSummary] = []


class Conflict(BaseModel):
    day: str
    time_slot: int
    course1: str
    course2: str


class ConflictValidation(BaseModel):
    has_conflicts: bool = False
    conflicts: List[Conflict] = []
    total_conflicts: int = 0


class GenerationMetadata(BaseModel):
    timestamp: str
    total_courses: int
    total_spans: int


class PersonalizedSchedule(BaseModel):
    weekly_table: WeeklyTable
    course_selection: List[CourseSelection]
    span_validation: SpanValidation
    conflict_validation: ConflictValidation
    generation_metadata: GenerationMetadata


class AssemblyResult(BaseModel):
    success: bool
    schedule: Optional[PersonalizedSchedule] = None
    error: Optional[str] = None
    validation_errors: List[str] = []


class GenerateIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    course_groups: List[CourseGroup]
    user_request: ScheduleRequest


class ValidateGroupsIn(BaseModel):
    course_groups: List[CourseGroup]


class InternalConflict(BaseModel):
    session1: str
    session2: str
    overlap: int


class GroupConflictReport(BaseModel):
    course_code: str
    group_code: str
    type: str = "internal_conflict"
    conflicts: List[InternalConflict]


class GroupValidationOut(BaseModel):
    valid: bool
    conflicts: List[GroupConflictReport] = []


class ExportIn(BaseModel):
    weekly_table: WeeklyTable
