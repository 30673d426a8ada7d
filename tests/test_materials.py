from fastapi.testclient import TestClient

from classconnect.models import Material
from conftest import PDF_BYTES


def error_code(response) -> str:
    return response.json()["error"]["code"]


def post_material(client, headers, classroom, topic, files=(), **fields):
    data = {
        "class_id": classroom["id"],
        "topic_id": topic["id"],
        "title": "Lecture slides",
        "description": "Week 1",
    }
    data.update(fields)
    return client.post(
        "/api/materials",
        data=data,
        files=[("attachments[]", f) for f in files],
        headers=headers,
    )


def test_create_and_list(client: TestClient, teacher, classroom, topic, enrolled):
    response = post_material(
        client, teacher[0], classroom, topic, [("slides.pdf", PDF_BYTES, "application/pdf")]
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["topicName"] == "Sorting"
    assert body["createdBy"] == teacher[1]["id"]
    assert [a["fileName"] for a in body["attachments"]] == ["slides.pdf"]

    post_material(client, teacher[0], classroom, topic, title="Reading list")
    listed = client.get(f"/api/materials/class/{classroom['id']}", headers=enrolled[0]).json()
    assert [m["title"] for m in listed] == ["Reading list", "Lecture slides"]

    topics = client.get(f"/api/topics/class/{classroom['id']}", headers=teacher[0]).json()
    assert topics[0]["materialsCount"] == 2


def test_word_documents_are_rejected(client: TestClient, storage, session, teacher, classroom, topic):
    docx = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    response = post_material(client, teacher[0], classroom, topic, [("notes.docx", b"PK", docx)])
    assert response.status_code == 400
    assert error_code(response) == "UNSUPPORTED_TYPE"
    assert list(storage.upload_dir.iterdir()) == []
    assert session.query(Material).count() == 0


def test_material_errors(client: TestClient, teacher, other_teacher, classroom, topic, enrolled):
    response = post_material(client, teacher[0], classroom, {"id": "missing"})
    assert response.status_code == 404
    assert error_code(response) == "TOPIC_NOT_FOUND"

    response = post_material(client, other_teacher[0], classroom, topic)
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"

    response = post_material(client, enrolled[0], classroom, topic)
    assert response.status_code == 403
    assert error_code(response) == "UNAUTHORIZED_ROLE"

    response = post_material(client, teacher[0], classroom, topic, title="  ")
    assert response.status_code == 400
    assert error_code(response) == "MISSING_FIELDS"


def test_listing_requires_membership(client: TestClient, classroom, other_student):
    response = client.get(f"/api/materials/class/{classroom['id']}", headers=other_student[0])
    assert response.status_code == 403
    assert error_code(response) == "ACCESS_DENIED"
