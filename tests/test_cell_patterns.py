import pytest

from schedule_backend.utils.cell_patterns import (
    Basic,
    Fallback,
    Shared,
    SingleWithRoom,
    find_room,
    looks_like_course_name,
    normalize_course_code,
    parse_course_cell,
    parse_selection_text,
    starts_course_block,
)


@pytest.mark.parametrize("text, expected", [
    ("EEC 12305,06", Shared("EEC 123", ("05", "06"))),
    ("EEC11302 C401", SingleWithRoom("EEC 113", ("02",), "C401")),
    ("EEC 113", Basic("EEC 113", ("13",))),
    ("  EEC 113  ", Basic("EEC 113", ("13",))),
    ("EEC 10107 (معمل)", Fallback("EEC 101", ("07",))),
    ("محاضرة EEC 142", Fallback("EEC 142", ("42",))),
])
def test_cell_forms(text, expected):
    assert parse_course_cell(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "رياضيات", "C501", "9.00 - 9.45", "eec 113"])
def test_non_course_cells(text):
    assert parse_course_cell(text) is None


def test_shared_form_wins_over_fallback():
    # the fallback regex alone would read "EEC 12305" as the code
    assert isinstance(parse_course_cell("EEC 12305,06"), Shared)


def test_block_starts_and_names():
    assert starts_course_block("EEC 113")
    assert starts_course_block("PHY101 lab")
    assert not starts_course_block("د. أحمد")
    assert not starts_course_block("C501")

    assert looks_like_course_name("دوائر كهربية")
    assert not looks_like_course_name("C402")
    assert not looks_like_course_name("")


def test_rooms():
    assert find_room("C512 - د. منى") == "C512"
    assert find_room("قاعة 5") == ""
    assert find_room(None) == ""


@pytest.mark.parametrize("text, expected", [
    ("EEC 101", ("EEC 101", None)),
    ("eec10105", ("EEC 101", "05")),
    ("EEC 10105,06", ("EEC 101", "05")),
    ("  EEC   113 ", ("EEC 113", None)),
    ("Physics", ("PHYSICS", None)),
])
def test_selection_text(text, expected):
    assert parse_selection_text(text) == expected


def test_normalize_course_code():
    assert normalize_course_code("eec101") == "EEC 101"
    assert normalize_course_code(" EEC   101 ") == "EEC 101"
    assert normalize_course_code(None) == ""


def test_room_is_a_whole_token():
    assert find_room("EEC10105,06") == ""
    assert find_room("EEC11302 C401") == "C401"
    assert find_room("C501") == "C501"


def test_every_parsed_cell_starts_a_block():
    for text in ("EEC 12305,06", "EEC11302 C401", "EEC 113", "محاضرة EEC 142"):
        assert parse_course_cell(text) is not None
        assert starts_course_block(text)
