from fastapi.testclient import TestClient

from classconnect.access import is_enrolled_in
from classconnect.models import Enrollment


def error_code(response) -> str:
    return response.json()["error"]["code"]


def test_search_students(client: TestClient, teacher, student, other_student):
    headers, _ = teacher

    response = client.get("/api/enrollments/search", params={"query": "student"}, headers=headers)
    assert response.status_code == 200
    assert sorted(s["name"] for s in response.json()) == ["Kim Student", "Sam Student"]

    response = client.get("/api/enrollments/search", params={"query": "sam@"}, headers=headers)
    assert [s["email"] for s in response.json()] == ["sam@example.com"]

    # teachers are never returned
    response = client.get("/api/enrollments/search", params={"query": "Teacher"}, headers=headers)
    assert response.json() == []


def test_search_wildcards_are_literal(client: TestClient, teacher, student):
    response = client.get("/api/enrollments/search", params={"query": "%"}, headers=teacher[0])
    assert response.json() == []


def test_search_requires_query_and_teacher(client: TestClient, teacher, student):
    response = client.get("/api/enrollments/search", headers=teacher[0])
    assert response.status_code == 400
    assert error_code(response) == "MISSING_QUERY"

    response = client.get("/api/enrollments/search", params={"query": "x"}, headers=student[0])
    assert response.status_code == 403
    assert error_code(response) == "UNAUTHORIZED_ROLE"


def test_enroll_and_list(client: TestClient, session, teacher, classroom, enrolled):
    _, user = enrolled
    assert is_enrolled_in(session, classroom["id"], user["id"])

    response = client.get(f"/api/enrollments/class/{classroom['id']}", headers=teacher[0])
    assert response.status_code == 200
    [row] = response.json()
    assert row["id"] == user["id"]
    assert row["email"] == user["email"]
    assert row["enrollmentDate"]


def test_enroll_twice(client: TestClient, session, teacher, classroom, enrolled):
    _, user = enrolled
    response = client.post(
        "/api/enrollments",
        json={"class_id": classroom["id"], "student_id": user["id"]},
        headers=teacher[0],
    )
    assert response.status_code == 400
    assert error_code(response) == "ALREADY_ENROLLED"
    assert session.query(Enrollment).filter_by(class_id=classroom["id"]).count() == 1


def test_unique_constraint_rejects_duplicate_enrollment(
    client: TestClient, session, monkeypatch, teacher, classroom, enrolled
):
    _, user = enrolled
    # skip the pre-check so the insert itself hits the constraint
    monkeypatch.setattr("classconnect.services.enrollments.is_enrolled_in", lambda *args: False)

    response = client.post(
        "/api/enrollments",
        json={"classId": classroom["id"], "studentId": user["id"]},
        headers=teacher[0],
    )
    assert response.status_code == 400
    assert error_code(response) == "ALREADY_ENROLLED"
    assert session.query(Enrollment).filter_by(class_id=classroom["id"]).count() == 1


def test_enroll_errors(client: TestClient, teacher, other_teacher, classroom, student):
    _, teacher_user = teacher
    _, student_user = student

    response = client.post(
        "/api/enrollments",
        json={"classId": classroom["id"], "studentId": teacher_user["id"]},
        headers=teacher[0],
    )
    assert response.status_code == 404
    assert error_code(response) == "STUDENT_NOT_FOUND"

    response = client.post(
        "/api/enrollments",
        json={"classId": classroom["id"], "studentId": student_user["id"]},
        headers=other_teacher[0],
    )
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"

    response = client.post("/api/enrollments", json={"classId": classroom["id"]}, headers=teacher[0])
    assert response.status_code == 400
    assert error_code(response) == "MISSING_FIELDS"


def test_roster_is_owner_only(client: TestClient, classroom, other_teacher, enrolled):
    url = f"/api/enrollments/class/{classroom['id']}"

    response = client.get(url, headers=enrolled[0])
    assert response.status_code == 403
    assert error_code(response) == "UNAUTHORIZED_ROLE"

    response = client.get(url, headers=other_teacher[0])
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"

    response = client.get("/api/enrollments/class/missing", headers=other_teacher[0])
    assert response.status_code == 404
    assert error_code(response) == "NOT_FOUND"


def test_unenroll(client: TestClient, session, teacher, classroom, enrolled):
    headers, user = enrolled
    url = f"/api/enrollments/{classroom['id']}/{user['id']}"

    response = client.delete(url, headers=teacher[0])
    assert response.status_code == 200
    assert not is_enrolled_in(session, classroom["id"], user["id"])

    response = client.get(f"/api/classes/{classroom['id']}", headers=headers)
    assert response.status_code == 403

    response = client.delete(url, headers=teacher[0])
    assert response.status_code == 404
    assert error_code(response) == "NOT_ENROLLED"


def test_unenroll_by_other_teacher(client: TestClient, other_teacher, classroom, enrolled):
    _, user = enrolled
    response = client.delete(f"/api/enrollments/{classroom['id']}/{user['id']}", headers=other_teacher[0])
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"
