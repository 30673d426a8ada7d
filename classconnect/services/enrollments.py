"""Enrolling students into classes and removing them."""

import logging
from typing import List

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classconnect.access import ensure_class_owner, is_enrolled_in
from classconnect.errors import BadRequest, NotFound
from classconnect.models import Enrollment, User, UserRole
from classconnect.schemas.common import UserSummary
from classconnect.schemas.enrollments import EnrolledStudent, EnrollmentCreate, EnrollmentOut
from classconnect.security import Identity
from classconnect.services._common import notify


logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class EnrollmentService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def search_students(self, query: str | None) -> List[UserSummary]:
        """Students whose name, email or id contains ``query``."""

        if query is None or not query.strip():
            raise BadRequest("Search query is required", code="MISSING_QUERY")
        pattern = _like_pattern(query.strip())
        stmt = (
            select(User)
            .where(
                User.role == UserRole.STUDENT,
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                    User.id.like(pattern, escape="\\"),
                ),
            )
            .order_by(User.name)
            .limit(SEARCH_LIMIT)
        )
        return [UserSummary.model_validate(u) for u in self.db.execute(stmt).scalars().all()]

    def list_for_class(self, class_id: str) -> List[EnrolledStudent]:
        stmt = (
            select(User, Enrollment.enrollment_date)
            .join(Enrollment, Enrollment.student_id == User.id)
            .where(Enrollment.class_id == class_id)
            .order_by(User.name.asc())
        )
        return [
            EnrolledStudent(
                id=user.id,
                name=user.name,
                email=user.email,
                avatar_url=user.avatar_url,
                enrollment_date=enrolled_at,
            )
            for user, enrolled_at in self.db.execute(stmt).all()
        ]

    def enroll(self, identity: Identity, data: EnrollmentCreate) -> EnrollmentOut:
        ensure_class_owner(
            self.db, data.class_id, identity,
            "You do not have permission to enroll students in this class",
        )
        student = self.db.get(User, data.student_id)
        if student is None or student.role != UserRole.STUDENT:
            raise NotFound("Student not found", code="STUDENT_NOT_FOUND")

        already = BadRequest("Student is already enrolled in this class", code="ALREADY_ENROLLED")
        # Pre-flight only; the unique constraint is what actually prevents duplicates.
        if is_enrolled_in(self.db, data.class_id, data.student_id):
            raise already

        enrollment = Enrollment(class_id=data.class_id, student_id=data.student_id)
        self.db.add(enrollment)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise already from exc
        self.db.refresh(enrollment)
        notify("enrolled", class_id=data.class_id, student_id=student.id)
        return EnrollmentOut(
            id=enrollment.id,
            class_id=enrollment.class_id,
            student=UserSummary.model_validate(student),
            enrollment_date=enrollment.enrollment_date,
        )

    def unenroll(self, identity: Identity, class_id: str, student_id: str) -> None:
        if not is_enrolled_in(self.db, class_id, student_id):
            raise NotFound("Student is not enrolled in this class", code="NOT_ENROLLED")
        self.db.execute(
            delete(Enrollment).where(
                Enrollment.class_id == class_id, Enrollment.student_id == student_id
            )
        )
        self.db.commit()
        logger.info("Teacher %s removed student %s from class %s", identity.id, student_id, class_id)
