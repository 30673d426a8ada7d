"""End-to-end walkthroughs across several resources."""

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from classconnect.models import Announcement, Assignment
from conftest import PDF_BYTES


def test_class_lifecycle_through_grading(client: TestClient, register, career):
    teacher_headers, _ = register("Maria Lopez", "maria@example.com", "teacher")
    student_headers, student = register("Luis Perez", "luis@example.com", "student")

    classroom = client.post(
        "/api/classes",
        json={"name": "Math 101", "career_id": career, "semester": "2024-1"},
        headers=teacher_headers,
    ).json()
    topic = client.post(
        "/api/topics", json={"class_id": classroom["id"], "name": "Algebra"}, headers=teacher_headers
    ).json()
    tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    assignment = client.post(
        "/api/assignments",
        data={
            "class_id": classroom["id"],
            "topic_id": topic["id"],
            "title": "Linear equations",
            "description": "Solve problems 1-10",
            "due_date": tomorrow,
        },
        headers=teacher_headers,
    ).json()

    found = client.get(
        "/api/enrollments/search", params={"query": "luis"}, headers=teacher_headers
    ).json()
    assert [s["id"] for s in found] == [student["id"]]
    response = client.post(
        "/api/enrollments",
        json={"classId": classroom["id"], "studentId": student["id"]},
        headers=teacher_headers,
    )
    assert response.status_code == 201

    [row] = client.get("/api/assignments/student", headers=student_headers).json()
    assert row["id"] == assignment["id"]
    assert row["status"] == "pending"

    response = client.post(
        f"/api/assignments/{assignment['id']}/submit",
        files=[("files[]", ("answers.pdf", PDF_BYTES, "application/pdf"))],
        headers=student_headers,
    )
    assert response.status_code == 201

    submissions = client.get(
        f"/api/assignments/{assignment['id']}/submissions", headers=teacher_headers
    ).json()
    assert len(submissions) == 1

    response = client.post(
        f"/api/assignments/{submissions[0]['id']}/grade",
        json={"grade": 85, "feedback": "Good"},
        headers=teacher_headers,
    )
    assert response.status_code == 200

    [row] = client.get("/api/assignments/student", headers=student_headers).json()
    assert row["grade"] == 85
    assert row["feedback"] == "Good"


def test_past_due_date_creates_nothing(client: TestClient, session, teacher, classroom, topic):
    yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    response = client.post(
        "/api/assignments",
        data={
            "class_id": classroom["id"],
            "topic_id": topic["id"],
            "title": "Too late",
            "description": "D",
            "due_date": yesterday,
        },
        headers=teacher[0],
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_DUE_DATE"
    assert session.query(Assignment).count() == 0


def test_student_announcement_leaves_no_trace(client: TestClient, session, storage, classroom, enrolled):
    response = client.post(
        "/api/announcements",
        data={"class_id": classroom["id"], "title": "Hi", "content": "Hello"},
        files=[("attachments[]", ("flyer.pdf", PDF_BYTES, "application/pdf"))],
        headers=enrolled[0],
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "UNAUTHORIZED_ROLE"
    assert list(storage.upload_dir.iterdir()) == []
    assert session.query(Announcement).count() == 0
