import pytest

from classconnect.access import (
    ensure_class_access,
    ensure_class_exists,
    ensure_class_owner,
    has_class_access,
    is_enrolled_in,
    is_teacher_of,
)
from classconnect.errors import Forbidden, NotFound
from classconnect.models import Career, Classroom, Enrollment, User, UserRole
from classconnect.security import Identity


@pytest.fixture
def world(session):
    career = Career(name="Accounting")
    teacher = User(name="T", email="t@example.com", password_hash="x", role=UserRole.TEACHER)
    student = User(name="S", email="s@example.com", password_hash="x", role=UserRole.STUDENT)
    outsider = User(name="O", email="o@example.com", password_hash="x", role=UserRole.STUDENT)
    session.add_all([career, teacher, student, outsider])
    session.flush()
    classroom = Classroom(
        name="Ledgers", class_code="LEDG01", career_id=career.id, semester="2024-2", teacher_id=teacher.id
    )
    session.add(classroom)
    session.flush()
    session.add(Enrollment(class_id=classroom.id, student_id=student.id))
    session.commit()
    return {"class": classroom, "teacher": teacher, "student": student, "outsider": outsider}


def identity_of(user: User) -> Identity:
    return Identity(id=user.id, name=user.name, email=user.email, role=user.role)


def test_is_teacher_of(session, world):
    class_id = world["class"].id
    assert is_teacher_of(session, class_id, world["teacher"].id)
    assert not is_teacher_of(session, class_id, world["student"].id)
    assert not is_teacher_of(session, "missing", world["teacher"].id)


def test_is_enrolled_in(session, world):
    class_id = world["class"].id
    assert is_enrolled_in(session, class_id, world["student"].id)
    assert not is_enrolled_in(session, class_id, world["outsider"].id)


def test_has_class_access_dispatches_on_role(session, world):
    class_id = world["class"].id
    assert has_class_access(session, class_id, world["teacher"].id, UserRole.TEACHER)
    assert has_class_access(session, class_id, world["student"].id, "student")
    # a teacher id checked as a student is not enrolled
    assert not has_class_access(session, class_id, world["teacher"].id, "student")
    assert not has_class_access(session, class_id, world["teacher"].id, "admin")


def test_ensure_helpers_raise(session, world):
    class_id = world["class"].id
    ensure_class_access(session, class_id, identity_of(world["student"]))
    ensure_class_owner(session, class_id, identity_of(world["teacher"]))

    with pytest.raises(Forbidden) as exc:
        ensure_class_access(session, class_id, identity_of(world["outsider"]))
    assert exc.value.code == "ACCESS_DENIED"

    with pytest.raises(Forbidden):
        ensure_class_owner(session, class_id, identity_of(world["student"]))

    assert ensure_class_exists(session, class_id).name == "Ledgers"
    with pytest.raises(NotFound):
        ensure_class_exists(session, "missing")
