"""Subject API tests."""

import uuid


def create_subject(client, headers, name, color=None):
    payload = {"name": name}
    if color:
        payload["color"] = color
    return client.post("/subjects", headers=headers, json=payload)


def create_entry(client, headers, subject_id, date, minutes=60):
    response = client.post(
        "/time-entries",
        headers=headers,
        json={"subject_id": subject_id, "date": date, "duration_minutes": minutes},
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_create_subject(client, auth_headers):
    """Test creating a subject."""
    response = create_subject(client, auth_headers, "Dairy", "#FFE4B5")
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "Dairy"
    assert data["color"] == "#FFE4B5"
    assert uuid.UUID(data["id"])


def test_created_subject_is_listed(client, auth_headers):
    subject_id = create_subject(client, auth_headers, "Reading").json()["data"]["id"]

    response = client.get("/subjects", headers=auth_headers)
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["data"]] == [subject_id]


def test_list_subjects_sorted_ignoring_case(client, auth_headers):
    for name in ["beta", "Charlie", "alpha"]:
        create_subject(client, auth_headers, name)

    response = client.get("/subjects", headers=auth_headers)
    assert [s["name"] for s in response.json()["data"]] == ["alpha", "beta", "Charlie"]


def test_duplicate_name_different_case_conflicts(client, auth_headers):
    create_subject(client, auth_headers, "Work")

    response = create_subject(client, auth_headers, "wORK")
    assert response.status_code == 409
    assert response.json()["error"] == {
        "code": "CONFLICT",
        "message": "subject name already exists",
    }


def test_same_name_allowed_for_different_users(client, auth_headers, other_auth_headers):
    assert create_subject(client, auth_headers, "Work").status_code == 201
    assert create_subject(client, other_auth_headers, "Work").status_code == 201


def test_subjects_are_private(client, auth_headers, other_auth_headers):
    create_subject(client, auth_headers, "Mine")

    response = client.get("/subjects", headers=other_auth_headers)
    assert response.json()["data"] == []


def test_subject_name_validation(client, auth_headers):
    assert create_subject(client, auth_headers, "").status_code == 400
    assert create_subject(client, auth_headers, "   ").status_code == 400
    assert create_subject(client, auth_headers, "x" * 61).status_code == 400
    assert create_subject(client, auth_headers, "x" * 60).status_code == 201


def test_missing_name_reports_field(client, auth_headers):
    response = client.post("/subjects", headers=auth_headers, json={})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["message"] == "Validation failed for fields: name"
    assert error["details"]["fields"][0]["path"] == "name"


def test_rename_subject(client, auth_headers, subject):
    response = client.put(
        f"/subjects/{subject['id']}/rename", headers=auth_headers, json={"new_name": "Coding"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Coding"

    listed = client.get("/subjects", headers=auth_headers).json()["data"]
    assert [s["name"] for s in listed] == ["Coding"]


def test_rename_to_own_name_in_other_case(client, auth_headers, subject):
    response = client.put(
        f"/subjects/{subject['id']}/rename", headers=auth_headers, json={"new_name": "PROGRAMMING"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "PROGRAMMING"


def test_rename_conflict(client, auth_headers, subject):
    create_subject(client, auth_headers, "Design")

    response = client.put(
        f"/subjects/{subject['id']}/rename", headers=auth_headers, json={"new_name": "design"}
    )
    assert response.status_code == 409


def test_rename_other_users_subject_not_found(client, subject, other_auth_headers):
    response = client.put(
        f"/subjects/{subject['id']}/rename", headers=other_auth_headers, json={"new_name": "Mine"}
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "subject not found"


def test_rename_invalid_id(client, auth_headers):
    response = client.put(
        "/subjects/not-a-uuid/rename", headers=auth_headers, json={"new_name": "X"}
    )
    assert response.status_code == 400


def test_join_moves_entries_and_deletes_source(client, auth_headers, subject):
    target = create_subject(client, auth_headers, "Software").json()["data"]
    for day in ["2024-03-01", "2024-03-02", "2024-03-03"]:
        create_entry(client, auth_headers, subject["id"], day)

    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={"source_subject_id": subject["id"], "target_subject_id": target["id"]},
    )
    assert response.status_code == 200
    assert response.json()["data"] == {"moved_count": 3, "target_subject_id": target["id"]}

    subjects = client.get("/subjects", headers=auth_headers).json()["data"]
    assert [s["id"] for s in subjects] == [target["id"]]

    entries = client.get("/time-entries", headers=auth_headers).json()["data"]
    assert len(entries) == 3
    assert {e["subject_id"] for e in entries} == {target["id"]}
    assert {e["subject_name"] for e in entries} == {"Software"}


def test_join_can_keep_source(client, auth_headers, subject):
    target = create_subject(client, auth_headers, "Software").json()["data"]
    create_entry(client, auth_headers, subject["id"], "2024-03-01")

    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={
            "source_subject_id": subject["id"],
            "target_subject_id": target["id"],
            "delete_source": False,
        },
    )
    assert response.json()["data"]["moved_count"] == 1

    names = [s["name"] for s in client.get("/subjects", headers=auth_headers).json()["data"]]
    assert names == ["Programming", "Software"]


def test_join_same_subject(client, auth_headers, subject):
    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={"source_subject_id": subject["id"], "target_subject_id": subject["id"]},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "source and target cannot be the same"


def test_join_missing_subjects(client, auth_headers, subject):
    missing = str(uuid.uuid4())

    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={"source_subject_id": missing, "target_subject_id": subject["id"]},
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "source subject not found"

    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={"source_subject_id": subject["id"], "target_subject_id": missing},
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "target subject not found"


def test_join_into_other_users_subject(client, auth_headers, other_auth_headers, subject):
    foreign = create_subject(client, other_auth_headers, "Theirs").json()["data"]

    response = client.post(
        "/subjects/join",
        headers=auth_headers,
        json={"source_subject_id": subject["id"], "target_subject_id": foreign["id"]},
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "target subject not found"
