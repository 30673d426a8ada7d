from classconnect.models import PRESET_CAREERS, Career, User, UserRole
from classconnect.security import verify_password
from classconnect.seed import DEMO_PASSWORD, DEMO_USERS, seed_demo_data


def test_seed_is_idempotent(session):
    first = seed_demo_data(session)
    session.commit()
    assert first == {"careers": len(PRESET_CAREERS), "users": len(DEMO_USERS)}

    second = seed_demo_data(session)
    session.commit()
    assert second == {"careers": 0, "users": 0}
    assert session.query(Career).count() == len(PRESET_CAREERS)


def test_demo_accounts_can_log_in(client, session):
    seed_demo_data(session)
    session.commit()

    teacher = session.query(User).filter_by(email="teacher@example.com").one()
    assert teacher.role == UserRole.TEACHER
    assert verify_password(DEMO_PASSWORD, teacher.password_hash)

    response = client.post(
        "/api/auth/login", json={"email": "student@example.com", "password": DEMO_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "student"
