import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("CLASSCONNECT_JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient

from classconnect.config import Settings
from classconnect.db import Database
from classconnect.main import create_app
from classconnect.models import Career
from classconnect.storage import FileStorage

TEST_SECRET = "test-secret"
PASSWORD = "password123"

# Smallest valid-looking payloads per allowed type
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.4\n%test\n"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture
def database(settings):
    """Fresh in-memory database per test."""
    db = Database(settings.database_url)
    db.create_all()
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage(settings) -> FileStorage:
    return FileStorage.from_settings(settings)


@pytest.fixture
def app(settings, database, storage):
    return create_app(settings, database=database, storage=storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def future(days: int = 7) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def register(client):
    """Register a user through the API; returns ``(headers, user)``."""

    def _register(name: str, email: str, role: str, password: str = PASSWORD):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return auth_headers(body["token"]), body["user"]

    return _register


@pytest.fixture
def teacher(register):
    return register("Ada Teacher", "ada@example.com", "teacher")


@pytest.fixture
def other_teacher(register):
    return register("Grace Teacher", "grace@example.com", "teacher")


@pytest.fixture
def student(register):
    return register("Sam Student", "sam@example.com", "student")


@pytest.fixture
def other_student(register):
    return register("Kim Student", "kim@example.com", "student")


@pytest.fixture
def career(session) -> str:
    row = Career(name="Computer Systems Engineering", description="Software")
    session.add(row)
    session.commit()
    return row.id


@pytest.fixture
def classroom(client, teacher, career) -> dict:
    headers, _ = teacher
    response = client.post(
        "/api/classes",
        json={"name": "Algorithms", "career_id": career, "semester": "2024-1", "description": "Intro"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def topic(client, teacher, classroom) -> dict:
    headers, _ = teacher
    response = client.post(
        "/api/topics",
        json={"class_id": classroom["id"], "name": "Sorting"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def enrolled(client, teacher, classroom, student):
    """``student`` enrolled in ``classroom``."""
    headers, _ = teacher
    _, user = student
    response = client.post(
        "/api/enrollments",
        json={"classId": classroom["id"], "studentId": user["id"]},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return student


@pytest.fixture
def assignment(client, teacher, classroom, topic) -> dict:
    headers, _ = teacher
    response = client.post(
        "/api/assignments",
        data={
            "class_id": classroom["id"],
            "topic_id": topic["id"],
            "title": "Merge sort",
            "description": "Implement merge sort",
            "due_date": future(),
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
