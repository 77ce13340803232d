import csv
import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook, load_workbook

from schedule_backend.deps import get_canonical_spans
from schedule_backend.main import app
from schedule_backend.utils.canonical_spans import CanonicalSpanRegistry

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def catalog_json(catalog):
    return [g.model_dump() for g in catalog]


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"message": "Schedule backend is running!"}


# ---------- /excel ----------
def test_extract_grid(client, saturday_grid):
    r = client.post("/excel/extract", json={"grid": saturday_grid})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    groups = [(g["course_code"], g["group_code"]) for g in body["data"]["parsing"]["course_groups"]]
    assert groups == [("EEC 101", "05"), ("EEC 101", "06"), ("MTH 101", "01")]
    assert body["data"]["file_info"] is None


def test_extract_empty_grid_is_400(client):
    r = client.post("/excel/extract", json={"grid": []})
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Invalid grid"


def test_parse_csv_upload(client, saturday_grid):
    buf = io.StringIO()
    csv.writer(buf).writerows(saturday_grid)
    data = buf.getvalue().encode("utf-8")

    r = client.post("/excel/parse", files={"file": ("timetable.csv", data, "text/csv")})

    assert r.status_code == 200
    body = r.json()["data"]
    assert body["file_info"]["original_name"] == "timetable.csv"
    assert body["file_info"]["size"] == len(data)
    entries = body["parsing"]["schedule_entries"]
    assert [(e["course_code"], e["group_code"], e["span"]) for e in entries] == [
        ("EEC 101", "05", 3), ("EEC 101", "06", 3), ("MTH 101", "01", 4),
    ]
    assert entries[0]["location"] == "C501"


def test_parse_xlsx_upload(client):
    wb = Workbook()
    ws = wb.active
    ws.append(["السبت"])
    ws.append([None, None, "EEC 11302 C401", None, "MTH 101"])
    ws.append([None, None, "إلكترونيات", None, "رياضيات"])
    ws.append([None, None, "م. سارة", None, "C402"])
    buf = io.BytesIO()
    wb.save(buf)

    r = client.post("/excel/parse", files={"file": ("timetable.xlsx", buf.getvalue(), XLSX_TYPE)})

    assert r.status_code == 200
    entries = r.json()["data"]["parsing"]["schedule_entries"]
    first = entries[0]
    assert (first["course_code"], first["group_code"], first["span"]) == ("EEC 113", "02", 2)
    assert first["location"] == "C401"
    assert first["instructor"] == "م. سارة"
    assert entries[1]["course_code"] == "MTH 101"


def test_parse_rejects_other_extensions(client):
    r = client.post("/excel/parse", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400


def test_parse_rejects_corrupt_workbook(client):
    r = client.post("/excel/parse", files={"file": ("broken.xlsx", b"not a zip", XLSX_TYPE)})
    assert r.status_code == 400


def test_canonical_spans_listing(client):
    r = client.get("/excel/canonical-spans")
    assert r.status_code == 200
    assert r.json()["data"]["EEC 101"] == {"lecture": 2, "lab": 1, "total": 3}


# ---------- /schedule ----------
def test_generate_personalized(client, catalog_json):
    r = client.post("/schedule/generate-personalized", json={
        "course_groups": catalog_json,
        "user_request": {"desired_courses": ["EEC 10105", {"code": "EEC 113"}]},
    })

    assert r.status_code == 200
    data = r.json()["data"]
    assert [s["group_number"] for s in data["course_selection"]] == ["05", "02"]
    saturday = data["weekly_table"]["schedule"]["Saturday"]
    assert saturday[0]["row1_course_info"]["display_text"] == "EEC 101 05,06"
    assert saturday[1]["is_continuation"] is True
    assert data["conflict_validation"]["has_conflicts"] is False


def test_generate_personalized_unknown_course_is_400(client, catalog_json):
    r = client.post("/schedule/generate-personalized", json={
        "course_groups": catalog_json,
        "user_request": {"desired_courses": ["EEC 999"]},
    })

    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["message"] == "Course span validation failed"
    assert detail["validation_errors"] == ["Course EEC 999 not found in Excel data"]


def test_validate_groups(client, catalog_json):
    r = client.post("/schedule/validate-groups", json={"course_groups": catalog_json})
    assert r.status_code == 200
    assert r.json()["data"] == {"valid": True, "conflicts": []}


def test_time_slots(client):
    data = client.get("/schedule/time-slots").json()["data"]
    assert data["days"][0] == "Saturday"
    assert data["total_slots_per_day"] == 8
    assert data["slots"][0] == {"id": 1, "start": "9.00", "end": "9.45", "label": "9.00 - 9.45", "excel_col": "C"}
    assert data["slots"][-1]["end"] == "3.30"


# ---------- /export ----------
def test_export_weekly_table(client, catalog_json):
    generated = client.post("/schedule/generate-personalized", json={
        "course_groups": catalog_json,
        "user_request": {"desired_courses": ["EEC 10105"]},
    }).json()["data"]

    r = client.post("/export/excel", json={"weekly_table": generated["weekly_table"]})

    assert r.status_code == 200
    assert r.headers["content-type"] == XLSX_TYPE
    assert "attachment" in r.headers["content-disposition"]

    ws = load_workbook(io.BytesIO(r.content)).active
    assert ws.sheet_view.rightToLeft is True
    assert ws["A2"].value == "السبت\nSaturday"
    assert ws["B2"].value.splitlines()[0] == "EEC 101 05,06"
    assert "B2:C2" in {str(rng) for rng in ws.merged_cells.ranges}
    # Monday lab, one slot, not merged
    assert ws["D4"].value.splitlines()[0] == "EEC 101 05"


# ---------- canonical span updates ----------
@pytest.fixture
def registry():
    registry = CanonicalSpanRegistry()
    app.dependency_overrides[get_canonical_spans] = lambda: registry
    yield registry
    app.dependency_overrides.pop(get_canonical_spans, None)


def test_update_canonical_span(client, registry):
    r = client.put("/excel/canonical-spans/phy101", json={"lecture": 2, "lab": 1, "total": 3})

    assert r.status_code == 200
    assert r.json()["data"] == {"course_code": "PHY 101", "spans": {"lecture": 2, "lab": 1, "total": 3}}
    assert client.get("/excel/canonical-spans").json()["data"]["PHY 101"]["total"] == 3


def test_updated_span_is_used_for_generation(client, registry):
    client.put("/excel/canonical-spans/EEC 113", json={"lecture": 2, "lab": 2, "total": 4})

    r = client.post("/schedule/generate-personalized", json={
        "course_groups": [{
            "course_code": "EEC 113",
            "group_code": "2",
            "sessions": [{"day_of_week": "Sunday", "start_time": "9.00", "end_time": "9.45",
                          "session_type": "lab", "span": 3}],
        }],
        "user_request": {"desired_courses": ["EEC 11302"]},
    })

    assert r.status_code == 200
    assert r.json()["data"]["span_validation"]["warnings"] == [
        "Course EEC 113 group 02: expected 4 spans, found 3 spans"
    ]


def test_update_canonical_span_rejects_bad_sum(client, registry):
    r = client.put("/excel/canonical-spans/EEC 101", json={"lecture": 2, "lab": 1, "total": 5})

    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Lecture + Lab spans must equal total spans"
    assert registry.table["EEC 101"].total == 3
