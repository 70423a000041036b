from datetime import date

from app.services.conflicts import PERMANENT, TEMPORARY, Commitment, Schedule, find_conflict, schedules_collide


def _faculty(client, headers, name: str, windows: list[tuple[str, str, str]]) -> dict:
    response = client.post(
        "/api/faculty",
        headers=headers,
        json={
            "name": name,
            "availability": [
                {"dayOfWeek": day, "startTime": start, "endTime": end} for day, start, end in windows
            ],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _batch_payload(name: str, faculty_id: str, start: str, end: str, days: list[str] | None = None) -> dict:
    return {
        "name": name,
        "startDate": "2025-01-01",
        "endDate": "2025-06-30",
        "startTime": start,
        "endTime": end,
        "daysOfWeek": days or ["Monday"],
        "facultyId": faculty_id,
    }


def _schedule(days, start, end, start_date=date(2025, 1, 1), end_date=date(2025, 3, 31)) -> Schedule:
    return Schedule(days_of_week=days, start_time=start, end_time=end, start_date=start_date, end_date=end_date)


def test_overlapping_batch_is_rejected_with_conflicting_name(client, admin_headers):
    faculty = _faculty(client, admin_headers, "Asha", [("Monday", "09:00", "12:00")])
    first = client.post("/api/batches", headers=admin_headers, json=_batch_payload("Math101", faculty["id"], "09:00", "10:00"))
    assert first.status_code == 201, first.text

    clash = client.post("/api/batches", headers=admin_headers, json=_batch_payload("Math102", faculty["id"], "09:30", "10:30"))
    assert clash.status_code == 409
    assert clash.json() == {"error": "Faculty has a scheduling conflict with batch: Math101."}


def test_back_to_back_batches_do_not_conflict(client, admin_headers):
    faculty = _faculty(client, admin_headers, "Asha", [("Monday", "09:00", "12:00")])
    client.post("/api/batches", headers=admin_headers, json=_batch_payload("Math101", faculty["id"], "09:00", "10:00"))

    response = client.post(
        "/api/batches", headers=admin_headers, json=_batch_payload("Math102", faculty["id"], "10:00", "11:00")
    )
    assert response.status_code == 201, response.text


def test_batch_outside_availability_is_rejected(client, admin_headers):
    faculty = _faculty(client, admin_headers, "Asha", [("Monday", "09:00", "12:00")])

    wrong_day = client.post(
        "/api/batches",
        headers=admin_headers,
        json=_batch_payload("Math101", faculty["id"], "09:00", "10:00", ["Monday", "Tuesday"]),
    )
    assert wrong_day.status_code == 400
    assert wrong_day.json()["error"] == "Faculty is not available on Tuesday."

    too_late = client.post(
        "/api/batches", headers=admin_headers, json=_batch_payload("Math101", faculty["id"], "11:00", "12:30")
    )
    assert too_late.status_code == 400
    assert too_late.json()["error"] == "Batch time on Monday is outside of faculty's available hours."


def test_batch_update_does_not_conflict_with_itself(client, admin_headers):
    faculty = _faculty(client, admin_headers, "Asha", [("Monday", "09:00", "12:00")])
    created = client.post(
        "/api/batches", headers=admin_headers, json=_batch_payload("Math101", faculty["id"], "09:00", "10:00")
    ).json()

    response = client.put(
        f"/api/batches/{created['id']}",
        headers=admin_headers,
        json=_batch_payload("Math101", faculty["id"], "09:30", "10:30"),
    )
    assert response.status_code == 200, response.text
    assert response.json()["start_time"] == "09:30"


def test_completed_batches_are_not_commitments(client, admin_headers):
    faculty = _faculty(client, admin_headers, "Asha", [("Monday", "09:00", "12:00")])
    past = _batch_payload("Old101", faculty["id"], "09:00", "10:00")
    past.update({"startDate": "2024-01-01", "endDate": "2024-12-31"})
    assert client.post("/api/batches", headers=admin_headers, json=past).status_code == 201

    current = _batch_payload("New101", faculty["id"], "09:00", "10:00")
    current.update({"startDate": "2024-06-01", "endDate": "2025-06-30"})
    response = client.post("/api/batches", headers=admin_headers, json=current)
    assert response.status_code == 201, response.text


def test_collision_needs_shared_day_dates_and_time():
    base = _schedule(["Monday", "Wednesday"], "09:00", "10:00")
    assert schedules_collide(base, _schedule(["wednesday"], "09:59", "11:00"))
    assert not schedules_collide(base, _schedule(["Tuesday"], "09:00", "10:00"))
    assert not schedules_collide(base, _schedule(["Monday"], "10:00", "11:00"))
    assert not schedules_collide(
        base, _schedule(["Monday"], "09:00", "10:00", start_date=date(2025, 4, 1), end_date=date(2025, 4, 30))
    )


def test_find_conflict_reports_first_match_of_either_kind():
    commitments = [
        Commitment(kind=PERMANENT, batch_id="b1", batch_name="Physics", schedule=_schedule(["Friday"], "09:00", "10:00")),
        Commitment(
            kind=TEMPORARY,
            batch_id="b2",
            batch_name="Chemistry",
            schedule=_schedule(["Monday"], "09:00", "10:00"),
            substitution_id="s1",
        ),
    ]
    hit = find_conflict(_schedule(["Monday"], "09:30", "10:30"), commitments)
    assert hit is not None
    assert hit.batch_name == "Chemistry"
    assert hit.kind == TEMPORARY
    assert find_conflict(_schedule(["Sunday"], "09:30", "10:30"), commitments) is None
