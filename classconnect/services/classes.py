"""Class listing, creation and detail."""

import logging
import secrets
import string
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classconnect.access import ensure_class_access, ensure_class_exists
from classconnect.errors import NotFound, ServerError
from classconnect.models import Career, Classroom, Enrollment, UserRole
from classconnect.schemas.classes import ClassCreate, ClassOut
from classconnect.security import Identity


logger = logging.getLogger(__name__)

CLASS_CODE_ALPHABET = string.ascii_uppercase + string.digits
CLASS_CODE_LENGTH = 6
CLASS_CODE_ATTEMPTS = 5


def generate_class_code(length: int = CLASS_CODE_LENGTH) -> str:
    return "".join(secrets.choice(CLASS_CODE_ALPHABET) for _ in range(length))


class ClassService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _to_out(self, classroom: Classroom, students_count: int | None = None) -> ClassOut:
        return ClassOut(
            id=classroom.id,
            name=classroom.name,
            description=classroom.description or "",
            class_code=classroom.class_code,
            career_id=classroom.career_id,
            career_name=classroom.career.name if classroom.career else None,
            semester=classroom.semester,
            teacher_id=classroom.teacher_id,
            teacher_name=classroom.teacher.name if classroom.teacher else None,
            students_count=students_count,
            created_at=classroom.created_at,
        )

    def list_for(self, identity: Identity) -> List[ClassOut]:
        """Teachers see the classes they own, students the ones they attend."""

        if identity.role == UserRole.TEACHER:
            stmt = (
                select(Classroom)
                .where(Classroom.teacher_id == identity.id)
                .order_by(Classroom.created_at.desc())
            )
        elif identity.role == UserRole.STUDENT:
            stmt = (
                select(Classroom)
                .join(Enrollment, Enrollment.class_id == Classroom.id)
                .where(Enrollment.student_id == identity.id)
                .order_by(Classroom.created_at.desc())
            )
        else:
            return []
        return [self._to_out(c) for c in self.db.execute(stmt).scalars().all()]

    def _code_taken(self, code: str) -> bool:
        return self.db.execute(select(Classroom.id).where(Classroom.class_code == code)).first() is not None

    def create(self, identity: Identity, data: ClassCreate) -> ClassOut:
        if self.db.get(Career, data.career_id) is None:
            raise NotFound("Career not found", code="NOT_FOUND")

        for attempt in range(1, CLASS_CODE_ATTEMPTS + 1):
            code = generate_class_code()
            if self._code_taken(code):
                continue
            classroom = Classroom(
                name=data.name,
                description=data.description or "",
                class_code=code,
                career_id=data.career_id,
                semester=data.semester,
                teacher_id=identity.id,
            )
            self.db.add(classroom)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning("Class code %s collided on insert (attempt %d)", code, attempt)
                continue
            self.db.refresh(classroom)
            logger.info("Teacher %s created class %s (%s)", identity.id, classroom.id, code)
            return self._to_out(classroom, students_count=0)

        raise ServerError("Could not generate a unique class code", code="SERVER_ERROR")

    def get(self, identity: Identity, class_id: str) -> ClassOut:
        classroom = ensure_class_exists(self.db, class_id)
        ensure_class_access(self.db, class_id, identity)
        students = self.db.execute(
            select(func.count(Enrollment.id)).where(Enrollment.class_id == class_id)
        ).scalar_one()
        return self._to_out(classroom, students_count=students)
