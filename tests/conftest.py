import os
import tempfile
from pathlib import Path

# keep test runs from writing logs/ into the working tree
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "schedule_backend_test_logs"))

import pytest

from schedule_backend.schemas.extraction import CourseGroup

from helpers import row, session


@pytest.fixture
def saturday_grid():
    # EEC 101 05,06 over C..E, MTH 101 over F..I
    return [
        row("السبت"),
        row("", "", "EEC 10105,06", "", "", "MTH 101"),
        row("", "", "دوائر كهربية", "", "", "رياضيات"),
        row("", "", "C501", "د. أحمد", "", "C402"),
    ]


@pytest.fixture
def catalog():
    lecture = dict(day="Saturday", start="9.00", end="9.45", span=2, session_type="lecture",
                   location="C501", instructor="د. أحمد")
    return [
        CourseGroup(course_code="EEC 101", group_code="05", course_name="دوائر كهربية", sessions=[
            session(**lecture),
            session("Monday", "10.40", "11.25", span=1, location="C301"),
        ]),
        CourseGroup(course_code="EEC 101", group_code="06", course_name="دوائر كهربية", sessions=[
            session(**lecture),
            session("Tuesday", "9.00", "9.45", span=1, instructor="م. سارة"),
        ]),
        CourseGroup(course_code="EEC 113", group_code="02", course_name="إلكترونيات", sessions=[
            session("Sunday", "9.00", "9.45", span=3),
        ]),
        CourseGroup(course_code="EEC 113", group_code="05", course_name="إلكترونيات", sessions=[
            session("Sunday", "12.20", "1.05", span=3),
        ]),
        CourseGroup(course_code="MTH 101", group_code="01", course_name="رياضيات", sessions=[
            session("Wednesday", "9.45", "10.30", span=2, session_type="lecture"),
        ]),
    ]
