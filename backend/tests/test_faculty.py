def _create_faculty(client, headers, **overrides) -> dict:
    payload = {
        "name": "Asha",
        "email": "asha@example.com",
        "employmentType": "part_time",
        "availability": [{"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "12:00"}],
    }
    payload.update(overrides)
    response = client.post("/api/faculty", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _batch(client, headers, faculty_id: str, **overrides):
    payload = {
        "name": "Math101",
        "startDate": "2025-01-01",
        "endDate": "2025-06-30",
        "startTime": "09:00",
        "endTime": "10:00",
        "daysOfWeek": ["Monday"],
        "facultyId": faculty_id,
    }
    payload.update(overrides)
    response = client.post("/api/batches", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_faculty_with_skills_and_availability(client, admin_headers):
    skill = client.post("/api/skills", headers=admin_headers, json={"name": "Physics"}).json()
    faculty = _create_faculty(client, admin_headers, skillIds=[skill["id"]])

    assert faculty["employment_type"] == "part_time"
    assert faculty["skills"] == [{"id": skill["id"], "name": "Physics"}]
    assert faculty["availability"][0]["day_of_week"] == "Monday"

    listed = client.get("/api/faculty", headers=admin_headers).json()
    assert [item["name"] for item in listed] == ["Asha"]


def test_duplicate_email_and_unknown_skill(client, admin_headers):
    _create_faculty(client, admin_headers)
    duplicate = client.post("/api/faculty", headers=admin_headers, json={"name": "Other", "email": "asha@example.com"})
    assert duplicate.status_code == 409

    bad_skill = client.post("/api/faculty", headers=admin_headers, json={"name": "Other", "skillIds": ["missing"]})
    assert bad_skill.status_code == 400
    assert bad_skill.json() == {"error": "One or more skill IDs are invalid."}


def test_repeated_availability_day_is_rejected(client, admin_headers):
    response = client.post(
        "/api/faculty",
        headers=admin_headers,
        json={
            "name": "Asha",
            "availability": [
                {"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "12:00"},
                {"dayOfWeek": "mon", "startTime": "13:00", "endTime": "15:00"},
            ],
        },
    )
    assert response.status_code == 400


def test_availability_replace_blocked_by_upcoming_batch(client, admin_headers):
    faculty = _create_faculty(client, admin_headers)
    _batch(client, admin_headers, faculty["id"])

    response = client.put(
        f"/api/faculty/{faculty['id']}/availability",
        headers=admin_headers,
        json={"availability": [{"dayOfWeek": "Tuesday", "startTime": "09:00", "endTime": "12:00"}]},
    )
    assert response.status_code == 409
    assert "Math101" in response.json()["error"]

    current = client.get(f"/api/faculty/{faculty['id']}/availability", headers=admin_headers).json()
    assert [item["day_of_week"] for item in current] == ["Monday"]


def test_availability_replace_ignores_far_future_batches(client, admin_headers):
    faculty = _create_faculty(client, admin_headers)
    _batch(client, admin_headers, faculty["id"], startDate="2025-06-01", endDate="2025-06-30")

    response = client.put(
        f"/api/faculty/{faculty['id']}/availability",
        headers=admin_headers,
        json={"availability": [{"dayOfWeek": "Tuesday", "startTime": "09:00", "endTime": "12:00"}]},
    )
    assert response.status_code == 200, response.text
    assert [item["day_of_week"] for item in response.json()] == ["Tuesday"]


def test_faculty_may_edit_only_own_availability(client, admin_headers, faculty_headers_for):
    mine = _create_faculty(client, admin_headers)
    other = _create_faculty(client, admin_headers, name="Bala", email="bala@example.com")
    body = {"availability": [{"dayOfWeek": "Friday", "startTime": "10:00", "endTime": "11:00"}]}

    own = client.put(f"/api/faculty/{mine['id']}/availability", headers=faculty_headers_for(mine["id"]), json=body)
    assert own.status_code == 200, own.text

    foreign = client.put(f"/api/faculty/{other['id']}/availability", headers=faculty_headers_for(mine["id"]), json=body)
    assert foreign.status_code == 403


def test_update_and_delete_faculty_unassigns_batches(client, admin_headers):
    faculty = _create_faculty(client, admin_headers)
    batch = _batch(client, admin_headers, faculty["id"])

    updated = client.put(f"/api/faculty/{faculty['id']}", headers=admin_headers, json={"phoneNumber": "98450"})
    assert updated.status_code == 200
    assert updated.json()["phone_number"] == "98450"

    deleted = client.delete(f"/api/faculty/{faculty['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "unassigned_batch_count": 1}

    batches = client.get("/api/batches", headers=admin_headers).json()
    assert batches[0]["id"] == batch["id"]
    assert batches[0]["faculty_id"] is None
    assert client.get(f"/api/faculty/{faculty['id']}/availability", headers=admin_headers).status_code == 404
