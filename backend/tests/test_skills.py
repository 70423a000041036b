def test_skills_are_unique_case_insensitively(client, admin_headers):
    created = client.post("/api/skills", headers=admin_headers, json={"name": "Physics"})
    assert created.status_code == 201

    duplicate = client.post("/api/skills", headers=admin_headers, json={"name": "physics"})
    assert duplicate.status_code == 409

    listed = client.get("/api/skills", headers=admin_headers).json()
    assert [item["name"] for item in listed] == ["Physics"]


def test_only_admin_creates_skills(client, admin_headers, faculty_headers_for):
    faculty = client.post("/api/faculty", headers=admin_headers, json={"name": "Asha"}).json()
    response = client.post("/api/skills", headers=faculty_headers_for(faculty["id"]), json={"name": "Chemistry"})
    assert response.status_code == 403
    assert client.get("/api/skills", headers=faculty_headers_for(faculty["id"])).status_code == 200
