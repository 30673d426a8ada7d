"""Access-control predicates and the route policies built on them.

Every class-scoped route goes through these checks before it reads or
writes anything:

- ``is_teacher_of``: the class exists and the user owns it.
- ``is_enrolled_in``: an enrollment row links the user to the class.
- ``has_class_access``: dispatches on role; any other role gets ``False``.
"""

from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from classconnect.dependencies import ensure_role, get_current_identity, get_db
from classconnect.errors import Forbidden, NotFound
from classconnect.models import Classroom, Enrollment, UserRole
from classconnect.security import Identity


def is_teacher_of(db: Session, class_id: str, user_id: str) -> bool:
    stmt = select(Classroom.id).where(Classroom.id == class_id, Classroom.teacher_id == user_id)
    return db.execute(stmt).first() is not None


def is_enrolled_in(db: Session, class_id: str, user_id: str) -> bool:
    stmt = select(Enrollment.id).where(
        Enrollment.class_id == class_id, Enrollment.student_id == user_id
    )
    return db.execute(stmt).first() is not None


def has_class_access(db: Session, class_id: str, user_id: str, role: UserRole | str) -> bool:
    role = role.value if isinstance(role, UserRole) else role
    if role == UserRole.TEACHER.value:
        return is_teacher_of(db, class_id, user_id)
    if role == UserRole.STUDENT.value:
        return is_enrolled_in(db, class_id, user_id)
    return False


def ensure_class_access(db: Session, class_id: str, identity: Identity) -> None:
    if not has_class_access(db, class_id, identity.id, identity.role):
        raise Forbidden("You do not have access to this class", code="ACCESS_DENIED")


def ensure_class_owner(db: Session, class_id: str, identity: Identity, message: Optional[str] = None) -> None:
    if not is_teacher_of(db, class_id, identity.id):
        raise Forbidden(message or "You do not have permission to modify this class", code="ACCESS_DENIED")


def ensure_class_exists(db: Session, class_id: str) -> Classroom:
    classroom = db.get(Classroom, class_id)
    if classroom is None:
        raise NotFound("Class not found", code="NOT_FOUND")
    return classroom


class ClassMember:
    """Route policy: the caller teaches or attends the class in the path."""

    def __call__(
        self,
        class_id: str,
        identity: Identity = Depends(get_current_identity),
        db: Session = Depends(get_db),
    ) -> Identity:
        ensure_class_exists(db, class_id)
        ensure_class_access(db, class_id, identity)
        return identity


class ClassOwner:
    """Route policy: the caller is a teacher and owns the class in the path."""

    def __call__(
        self,
        class_id: str,
        identity: Identity = Depends(get_current_identity),
        db: Session = Depends(get_db),
    ) -> Identity:
        ensure_role(identity, UserRole.TEACHER)
        ensure_class_exists(db, class_id)
        ensure_class_owner(db, class_id, identity)
        return identity


class_member = ClassMember()
class_owner = ClassOwner()
