from types import SimpleNamespace

from app.services.suggestions import AVAILABLE, AVAILABLE_OTHER_TIMES, classify, common_free_slots, intersect_slots


def _window(day: str, start: str, end: str) -> SimpleNamespace:
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end)


def _faculty(client, headers, name: str, skill_ids: list[str], days: list[str]) -> str:
    response = client.post(
        "/api/faculty",
        headers=headers,
        json={
            "name": name,
            "skillIds": skill_ids,
            "availability": [{"dayOfWeek": day, "startTime": "09:00", "endTime": "12:00"} for day in days],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _suggest(client, headers, skill_id: str, **overrides):
    payload = {
        "skillId": skill_id,
        "startDate": "2025-01-01",
        "endDate": "2025-01-31",
        "daysOfWeek": ["Monday", "Wednesday"],
    }
    payload.update(overrides)
    return client.post("/api/suggestions/suggest-faculty", headers=headers, json=payload)


def test_common_slots_intersect_across_days():
    windows = [_window("Monday", "09:00", "12:00"), _window("Wednesday", "10:00", "13:00")]
    booked = [(["Monday"], 600, 660)]
    assert common_free_slots(windows, booked, ["Monday", "Wednesday"]) == [(660, 720)]
    assert common_free_slots(windows, booked, ["Monday", "Friday"]) == []


def test_intersect_and_classify():
    assert intersect_slots([(540, 600), (660, 720)], [(570, 690)]) == [(570, 600), (660, 690)]
    assert classify([(600, 720)], None, None) == AVAILABLE
    assert classify([(600, 720)], "10:00", "11:00") == AVAILABLE
    assert classify([(600, 720)], "09:00", "10:00") == AVAILABLE_OTHER_TIMES


def test_suggest_faculty_ranks_by_requested_time(client, admin_headers):
    skill = client.post("/api/skills", headers=admin_headers, json={"name": "Physics"}).json()["id"]
    asha = _faculty(client, admin_headers, "Asha", [skill], ["Monday", "Wednesday"])
    _faculty(client, admin_headers, "Bala", [skill], ["Monday"])
    _faculty(client, admin_headers, "Chitra", [], ["Monday", "Wednesday"])
    client.post(
        "/api/batches",
        headers=admin_headers,
        json={
            "name": "Math101",
            "startDate": "2025-01-01",
            "endDate": "2025-03-31",
            "startTime": "09:00",
            "endTime": "10:00",
            "daysOfWeek": ["Monday"],
            "facultyId": asha,
        },
    )

    fits = _suggest(client, admin_headers, skill, startTime="10:00", endTime="11:00")
    assert fits.status_code == 200, fits.text
    suggestions = fits.json()["suggestions"]
    assert [item["name"] for item in suggestions] == ["Asha"]
    assert suggestions[0]["common_slots"] == [{"start": "10:00", "end": "12:00"}]
    assert suggestions[0]["status"] == "available"

    elsewhere = _suggest(client, admin_headers, skill, startTime="09:00", endTime="10:00").json()
    assert elsewhere["suggestions"][0]["status"] == "available_other_times"


def test_suggest_faculty_requires_admin(client, admin_headers, faculty_headers_for):
    skill = client.post("/api/skills", headers=admin_headers, json={"name": "Physics"}).json()["id"]
    faculty_id = _faculty(client, admin_headers, "Asha", [skill], ["Monday"])
    response = _suggest(client, faculty_headers_for(faculty_id), skill)
    assert response.status_code == 403
