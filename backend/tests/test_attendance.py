from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import IntegrityViolation
from app.models.attendance import StudentAttendance
from app.models.batch import Batch, BatchStudent
from app.models.student import Student
from app.schemas.attendance import AttendanceMark
from app.services.attendance import upsert_attendance

MONDAY = "2025-01-06"
NEXT_MONDAY = "2025-01-13"


def _faculty(client, headers, name: str) -> str:
    response = client.post(
        "/api/faculty",
        headers=headers,
        json={"name": name, "availability": [{"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "12:00"}]},
    )
    return response.json()["id"]


def _setup(client, headers) -> dict:
    faculty_id = _faculty(client, headers, "Asha")
    students = [
        client.post("/api/students", headers=headers, json={"name": name, "admissionNumber": code}).json()["id"]
        for name, code in [("Ravi", "A-1"), ("Sita", "A-2")]
    ]
    batch = client.post(
        "/api/batches",
        headers=headers,
        json={
            "name": "Math101",
            "startDate": "2025-01-01",
            "endDate": "2025-03-31",
            "startTime": "09:00",
            "endTime": "10:00",
            "daysOfWeek": ["Monday"],
            "facultyId": faculty_id,
            "studentIds": students,
        },
    ).json()
    return {"faculty_id": faculty_id, "students": students, "batch_id": batch["id"]}


def _mark(client, headers, batch_id: str, on_date: str, marks: dict[str, bool]):
    return client.post(
        "/api/attendance",
        headers=headers,
        json={
            "batchId": batch_id,
            "date": on_date,
            "attendance": [{"studentId": key, "isPresent": value} for key, value in marks.items()],
        },
    )


def test_marking_twice_updates_existing_rows(client, admin_headers):
    setup = _setup(client, admin_headers)
    first, second = setup["students"]

    created = _mark(client, admin_headers, setup["batch_id"], MONDAY, {first: True, second: False})
    assert created.status_code == 201, created.text

    updated = _mark(client, admin_headers, setup["batch_id"], MONDAY, {second: True})
    assert updated.status_code == 201
    assert updated.json()[0]["id"] in {item["id"] for item in created.json()}

    daily = client.get(
        f"/api/attendance/batch/{setup['batch_id']}/daily", headers=admin_headers, params={"date": MONDAY}
    ).json()
    assert len(daily) == 2
    assert all(item["is_present"] for item in daily)
    assert daily[0]["student"]["name"] == "Ravi"


def test_marking_unenrolled_student_is_rejected(client, admin_headers):
    setup = _setup(client, admin_headers)
    outsider = client.post("/api/students", headers=admin_headers, json={"name": "Tara", "admissionNumber": "A-3"})

    response = _mark(client, admin_headers, setup["batch_id"], MONDAY, {outsider.json()["id"]: True})
    assert response.status_code == 400
    assert response.json() == {"error": "One or more students are not enrolled in this batch."}

    missing = _mark(client, admin_headers, "missing", MONDAY, {setup["students"][0]: True})
    assert missing.status_code == 404


def test_batch_report_groups_by_date(client, admin_headers):
    setup = _setup(client, admin_headers)
    first, second = setup["students"]
    _mark(client, admin_headers, setup["batch_id"], MONDAY, {first: True, second: False})
    _mark(client, admin_headers, setup["batch_id"], NEXT_MONDAY, {first: False})

    report = client.get(
        f"/api/attendance/reports/batch/{setup['batch_id']}",
        headers=admin_headers,
        params={"startDate": "2025-01-01", "endDate": "2025-01-31"},
    )
    assert report.status_code == 200, report.text
    body = report.json()
    assert [item["name"] for item in body["students"]] == ["Ravi", "Sita"]
    assert sorted(body["attendance_by_date"]) == [MONDAY, NEXT_MONDAY]
    assert body["attendance_by_date"][NEXT_MONDAY] == [{"student_id": first, "is_present": False}]

    no_range = client.get(f"/api/attendance/reports/batch/{setup['batch_id']}", headers=admin_headers)
    assert no_range.status_code == 400


def test_sessions_are_credited_to_acting_faculty(client, admin_headers):
    setup = _setup(client, admin_headers)
    substitute = _faculty(client, admin_headers, "Bala")
    first, second = setup["students"]
    client.post(
        "/api/substitution/temporary",
        headers=admin_headers,
        json={
            "batchId": setup["batch_id"],
            "substituteFacultyId": substitute,
            "startDate": NEXT_MONDAY,
            "endDate": NEXT_MONDAY,
        },
    )
    _mark(client, admin_headers, setup["batch_id"], MONDAY, {first: True, second: False})
    _mark(client, admin_headers, setup["batch_id"], NEXT_MONDAY, {first: True, second: True})
    params = {"startDate": "2025-01-01", "endDate": "2025-01-31"}

    owner = client.get(f"/api/attendance/reports/faculty/{setup['faculty_id']}", headers=admin_headers, params=params)
    assert owner.status_code == 200, owner.text
    assert owner.json()["sessions"] == 1
    assert owner.json()["present"] == 1
    assert owner.json()["absent"] == 1

    covering = client.get(f"/api/attendance/reports/faculty/{substitute}", headers=admin_headers, params=params).json()
    assert covering["sessions"] == 1
    assert covering["present"] == 2
    assert covering["batches"][0]["batch_name"] == "Math101"

    overall = client.get("/api/attendance/reports/overall", headers=admin_headers, params=params).json()
    assert overall["sessions"] == 2
    assert overall["present"] == 3
    assert {item["faculty"]["name"] for item in overall["faculty"]} == {"Asha", "Bala"}


def test_faculty_can_read_only_own_report(client, admin_headers, faculty_headers_for):
    setup = _setup(client, admin_headers)
    other = _faculty(client, admin_headers, "Bala")
    params = {"startDate": "2025-01-01", "endDate": "2025-01-31"}
    headers = faculty_headers_for(setup["faculty_id"])

    own = client.get(f"/api/attendance/reports/faculty/{setup['faculty_id']}", headers=headers, params=params)
    assert own.status_code == 200
    foreign = client.get(f"/api/attendance/reports/faculty/{other}", headers=headers, params=params)
    assert foreign.status_code == 403
    assert client.get("/api/attendance/reports/overall", headers=headers, params=params).status_code == 403


def test_concurrent_attendance_insert_reports_conflict(db_session, monkeypatch):
    student = Student(name="Ravi", admission_number="A-1")
    batch = Batch(
        name="Math101",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 3, 31),
        start_time="09:00",
        end_time="10:00",
        days_of_week=["Monday"],
    )
    db_session.add_all([student, batch])
    db_session.flush()
    db_session.add(BatchStudent(batch_id=batch.id, student_id=student.id))
    db_session.commit()
    batch_id, student_id = batch.id, student.id

    def racing_commit():
        raise IntegrityError(
            "INSERT INTO student_attendance",
            {},
            Exception("UNIQUE constraint failed: student_attendance.batch_id, student_attendance.student_id"),
        )

    monkeypatch.setattr(db_session, "commit", racing_commit)
    with pytest.raises(IntegrityViolation) as exc_info:
        upsert_attendance(
            db_session,
            batch_id,
            date(2025, 1, 6),
            [AttendanceMark(student_id=student_id, is_present=True)],
        )
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Attendance for this batch and date was saved concurrently; please retry."

    monkeypatch.undo()
    assert db_session.query(StudentAttendance).count() == 0
