from fastapi.testclient import TestClient


def error_code(response) -> str:
    return response.json()["error"]["code"]


def test_topics_are_appended_in_order(client: TestClient, teacher, classroom):
    headers, _ = teacher
    created = []
    for name in ("Sorting", "Graphs", "Dynamic programming"):
        response = client.post(
            "/api/topics", json={"classId": classroom["id"], "name": name}, headers=headers
        )
        assert response.status_code == 201
        created.append(response.json())
    assert [t["orderIndex"] for t in created] == [1, 2, 3]

    listed = client.get(f"/api/topics/class/{classroom['id']}", headers=headers).json()
    assert [t["name"] for t in listed] == ["Sorting", "Graphs", "Dynamic programming"]


def test_topic_counts(client: TestClient, teacher, topic, assignment):
    headers, _ = teacher
    listed = client.get(f"/api/topics/class/{topic['classId']}", headers=headers).json()
    assert listed[0]["assignmentsCount"] == 1
    assert listed[0]["materialsCount"] == 0


def test_only_the_owner_adds_topics(client: TestClient, classroom, other_teacher, student):
    payload = {"class_id": classroom["id"], "name": "Intruder"}

    response = client.post("/api/topics", json=payload, headers=other_teacher[0])
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"

    response = client.post("/api/topics", json=payload, headers=student[0])
    assert response.status_code == 403
    assert error_code(response) == "UNAUTHORIZED_ROLE"


def test_topic_requires_name(client: TestClient, teacher, classroom):
    response = client.post("/api/topics", json={"class_id": classroom["id"]}, headers=teacher[0])
    assert response.status_code == 400
    assert error_code(response) == "MISSING_FIELDS"


def test_listing_topics_requires_membership(client: TestClient, topic, enrolled, other_student):
    url = f"/api/topics/class/{topic['classId']}"
    assert client.get(url, headers=enrolled[0]).status_code == 200

    response = client.get(url, headers=other_student[0])
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"

    response = client.get("/api/topics/class/missing", headers=enrolled[0])
    assert response.status_code == 404
    assert error_code(response) == "NOT_FOUND"
