from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from schedule_backend.utils.cell_patterns import pad_group

SessionType = Literal["lecture", "lab"]


class ScheduleEntry(BaseModel):
    course_code: str
    group_code: str
    course_name: str = ""
    instructor: str = ""
    location: str = ""
    day_of_week: str
    start_time: str
    end_time: str
    session_type: SessionType
    time_slot: int = Field(ge=1, le=8)
    span: int = Field(ge=1)
    shared_groups: List[str] = []


class SessionOut(BaseModel):
    day_of_week: str
    start_time: str
    end_time: str
    location: str = ""
    instructor: str = ""
    session_type: SessionType
    time_slot: Optional[int] = None
    span: int = Field(default=1, ge=1)
    shared_groups: List[str] = []


class CourseGroup(BaseModel):
    model_config = ConfigDict(extra="ignore")

    course_code: str
    group_code: str
    course_name: str = ""
    sessions: List[SessionOut] = []

    @field_validator("group_code", mode="before")
    @classmethod
    def _pad_group_code(cls, v):
        # "5" or 5 -> "05", the form selections are matched against
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and v.strip():
            return pad_group(v)
        return v

    def total_spans(self) -> int:
        return sum(s.span for s in self.sessions)


class SpanInconsistency(BaseModel):
    course_code: str
    spans: List[int]


class SpanStatistics(BaseModel):
    total_courses: int = 0
    consistent_courses: int = 0
    inconsistent_courses: int = 0
    span_distribution: Dict[int, int] = {}


class ParsingSummary(BaseModel):
    total_entries: int = 0
    course_codes_found: int = 0
    groups_found: int = 0
    with_course_names: int = 0
    with_rooms: int = 0
    with_instructors: int = 0
    shared_group_entries: int = 0


class ExtractionResult(BaseModel):
    schedule_entries: List[ScheduleEntry]
    course_groups: List[CourseGroup]
    span_statistics: SpanStatistics
    span_inconsistencies: List[SpanInconsistency] = []
    parsing_summary: ParsingSummary


class GridIn(BaseModel):
    grid: List[List[Optional[str | int | float]]]


class FileInfo(BaseModel):
    original_name: str
    size: int
    uploaded_at: str


class ParseData(BaseModel):
    parsing: ExtractionResult
    file_info: Optional[FileInfo] = None


class ParseOut(BaseModel):
    success: bool = True
    data: ParseData


class CanonicalSpanIn(BaseModel):
    lecture: int
    lab: int
    total: int
