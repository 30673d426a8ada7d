"""Assignments, student submissions and grading."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from classconnect.access import ensure_class_access, ensure_class_owner, is_enrolled_in
from classconnect.db import transaction
from classconnect.errors import BadRequest, Forbidden, NotFound
from classconnect.models import (
    Assignment,
    AssignmentAttachment,
    Classroom,
    Enrollment,
    Submission,
    SubmissionFile,
    Topic,
    UserRole,
)
from classconnect.models._common import as_utc, utcnow
from classconnect.schemas.assignments import (
    AssignmentCreate,
    AssignmentOut,
    AssignmentStatus,
    GradedSubmission,
    GradeRequest,
    SubmissionDetail,
    SubmissionOut,
)
from classconnect.schemas.common import UserSummary
from classconnect.security import Identity
from classconnect.services._common import attachments_out, notify
from classconnect.storage import FileStorage


logger = logging.getLogger(__name__)


def derive_status(has_submission: bool, due_date: datetime, now: datetime) -> AssignmentStatus:
    """``submitted`` wins over ``expired``, which wins over ``pending``."""

    if has_submission:
        return AssignmentStatus.SUBMITTED
    if as_utc(due_date) < as_utc(now):
        return AssignmentStatus.EXPIRED
    return AssignmentStatus.PENDING


class AssignmentService:
    def __init__(
        self,
        db: Session,
        storage: Optional[FileStorage] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.storage = storage
        self.clock = clock

    # --- shaping -----------------------------------------------------------

    def _base_out(self, assignment: Assignment, class_name: Optional[str] = None) -> AssignmentOut:
        return AssignmentOut(
            id=assignment.id,
            class_id=assignment.class_id,
            class_name=class_name,
            topic_id=assignment.topic_id,
            topic_name=assignment.topic.name if assignment.topic else "",
            title=assignment.title,
            description=assignment.instructions,
            due_date=assignment.due_date,
            created_at=assignment.created_at,
            attachments=attachments_out(assignment.attachments),
        )

    def _student_out(
        self,
        assignment: Assignment,
        submission: Optional[Submission],
        now: datetime,
        class_name: Optional[str] = None,
        include_files: bool = False,
    ) -> AssignmentOut:
        out = self._base_out(assignment, class_name)
        out.status = derive_status(submission is not None, assignment.due_date, now)
        if submission is not None:
            out.submission_date = as_utc(submission.submission_date)
            out.grade = submission.grade
            out.feedback = submission.feedback
        if include_files:
            out.submission_files = attachments_out(submission.files) if submission else []
        return out

    def _own_submissions(self, student_id: str, assignment_ids: Sequence[str]) -> Dict[str, Submission]:
        if not assignment_ids:
            return {}
        stmt = (
            select(Submission)
            .options(selectinload(Submission.files))
            .where(Submission.student_id == student_id, Submission.assignment_id.in_(assignment_ids))
        )
        return {s.assignment_id: s for s in self.db.execute(stmt).scalars().all()}

    def _submission_counts(self, assignment_ids: Sequence[str]) -> Dict[str, int]:
        if not assignment_ids:
            return {}
        stmt = (
            select(Submission.assignment_id, func.count(Submission.id))
            .where(Submission.assignment_id.in_(assignment_ids))
            .group_by(Submission.assignment_id)
        )
        return dict(self.db.execute(stmt).all())

    def _load(self, assignment_id: str) -> Assignment:
        stmt = (
            select(Assignment)
            .options(selectinload(Assignment.attachments), selectinload(Assignment.topic))
            .where(Assignment.id == assignment_id)
        )
        assignment = self.db.execute(stmt).scalar_one_or_none()
        if assignment is None:
            raise NotFound("Assignment not found", code="ASSIGNMENT_NOT_FOUND")
        return assignment

    # --- reads -------------------------------------------------------------

    def list_for_class(self, identity: Identity, class_id: str) -> List[AssignmentOut]:
        """Latest due date first. Teachers get counts, students their own status."""

        stmt = (
            select(Assignment)
            .options(selectinload(Assignment.attachments), selectinload(Assignment.topic))
            .where(Assignment.class_id == class_id)
            .order_by(Assignment.due_date.desc())
        )
        assignments = self.db.execute(stmt).scalars().all()
        ids = [a.id for a in assignments]

        if identity.role == UserRole.TEACHER:
            counts = self._submission_counts(ids)
            result = []
            for assignment in assignments:
                out = self._base_out(assignment)
                out.submissions_count = counts.get(assignment.id, 0)
                result.append(out)
            return result

        now = self.clock()
        submissions = self._own_submissions(identity.id, ids)
        return [self._student_out(a, submissions.get(a.id), now) for a in assignments]

    def list_for_student(self, identity: Identity) -> List[AssignmentOut]:
        """Every assignment across the student's classes, soonest due first."""

        stmt = (
            select(Assignment, Classroom.name)
            .join(Classroom, Classroom.id == Assignment.class_id)
            .join(Enrollment, Enrollment.class_id == Classroom.id)
            .options(selectinload(Assignment.attachments), selectinload(Assignment.topic))
            .where(Enrollment.student_id == identity.id)
            .order_by(Assignment.due_date.asc())
        )
        rows = self.db.execute(stmt).all()
        submissions = self._own_submissions(identity.id, [a.id for a, _ in rows])
        now = self.clock()
        return [
            self._student_out(a, submissions.get(a.id), now, class_name=class_name, include_files=True)
            for a, class_name in rows
        ]

    def get(self, identity: Identity, assignment_id: str) -> AssignmentOut:
        assignment = self._load(assignment_id)
        ensure_class_access(self.db, assignment.class_id, identity)
        if identity.role == UserRole.TEACHER:
            out = self._base_out(assignment)
            out.submissions_count = self._submission_counts([assignment.id]).get(assignment.id, 0)
            return out
        submission = self._own_submissions(identity.id, [assignment.id]).get(assignment.id)
        return self._student_out(assignment, submission, self.clock(), include_files=True)

    # --- writes ------------------------------------------------------------

    async def create(
        self, identity: Identity, data: AssignmentCreate, uploads: Sequence[UploadFile]
    ) -> AssignmentOut:
        if as_utc(data.due_date) <= self.clock():
            raise BadRequest("Due date must be in the future", code="INVALID_DUE_DATE")
        ensure_class_owner(
            self.db, data.class_id, identity,
            "You do not have permission to create assignments for this class",
        )
        topic = self.db.execute(
            select(Topic).where(Topic.id == data.topic_id, Topic.class_id == data.class_id)
        ).scalar_one_or_none()
        if topic is None:
            raise NotFound("Topic not found or does not belong to this class", code="TOPIC_NOT_FOUND")

        stored = await self.storage.store_uploads(uploads)
        with transaction(self.db, cleanup=[self.storage.cleanup_callback(stored)]):
            assignment = Assignment(
                class_id=data.class_id,
                topic_id=topic.id,
                title=data.title,
                instructions=data.description,
                due_date=data.due_date,
                created_by=identity.id,
            )
            self.db.add(assignment)
            self.db.flush()
            for position, f in enumerate(stored):
                self.db.add(
                    AssignmentAttachment(
                        assignment_id=assignment.id,
                        file_name=f.original_name,
                        stored_name=f.stored_name,
                        file_url=f.url,
                        file_size=f.size,
                        file_type=f.mime_type,
                        position=position,
                    )
                )

        notify("assignment", class_id=data.class_id, title=data.title, due=as_utc(data.due_date).isoformat())
        self.db.expire_all()
        out = self._base_out(self._load(assignment.id))
        out.submissions_count = 0
        return out

    def _find_submission(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        return self.db.execute(
            select(Submission)
            .options(selectinload(Submission.files))
            .where(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
        ).scalar_one_or_none()

    def _claim_submission(self, assignment_id: str, student_id: str, now: datetime) -> Submission:
        """Insert the student's row, or load it if another request inserted it first."""

        submission = Submission(assignment_id=assignment_id, student_id=student_id, submission_date=now)
        self.db.add(submission)
        try:
            self.db.flush()
        except IntegrityError:
            # only the insert is pending at this point
            self.db.rollback()
            winner = self._find_submission(assignment_id, student_id)
            if winner is None:
                raise
            logger.info("Concurrent submission for assignment %s, updating existing row", assignment_id)
            return winner
        return submission

    async def submit(
        self,
        identity: Identity,
        assignment_id: str,
        comment: Optional[str],
        uploads: Sequence[UploadFile],
    ) -> SubmissionOut:
        """Create the student's submission, or overwrite it and clear the grade."""

        assignment = self.db.get(Assignment, assignment_id)
        if assignment is None:
            raise NotFound("Assignment not found", code="ASSIGNMENT_NOT_FOUND")
        if not is_enrolled_in(self.db, assignment.class_id, identity.id):
            raise Forbidden("You are not enrolled in this class", code="ACCESS_DENIED")
        now = self.clock()
        if as_utc(assignment.due_date) < now:
            raise BadRequest("Assignment submission deadline has passed", code="PAST_DUE_DATE")

        comment = comment.strip() if comment and comment.strip() else None
        existing = self._find_submission(assignment_id, identity.id)

        stored = await self.storage.store_uploads(uploads)
        with transaction(self.db, cleanup=[self.storage.cleanup_callback(stored)]):
            submission = existing or self._claim_submission(assignment_id, identity.id, now)
            replaced = [f.stored_name for f in submission.files]
            submission.comment = comment
            submission.submission_date = now
            submission.grade = None
            submission.files.clear()
            for position, f in enumerate(stored):
                submission.files.append(
                    SubmissionFile(
                        file_name=f.original_name,
                        stored_name=f.stored_name,
                        file_url=f.url,
                        file_size=f.size,
                        file_type=f.mime_type,
                        position=position,
                    )
                )
        submission_id = submission.id

        self.storage.delete_many(replaced)
        logger.info(
            "Student %s %s assignment %s",
            identity.id, "resubmitted" if existing else "submitted", assignment_id,
        )
        self.db.expire_all()
        submission = self.db.execute(
            select(Submission).options(selectinload(Submission.files)).where(Submission.id == submission_id)
        ).scalar_one()
        return SubmissionOut(
            id=submission.id,
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            comment=submission.comment,
            submission_date=submission.submission_date,
            grade=submission.grade,
            feedback=submission.feedback,
            files=attachments_out(submission.files),
        )

    def list_submissions(self, identity: Identity, assignment_id: str) -> List[SubmissionDetail]:
        owned = self.db.execute(
            select(Assignment.id)
            .join(Classroom, Classroom.id == Assignment.class_id)
            .where(Assignment.id == assignment_id, Classroom.teacher_id == identity.id)
        ).first()
        if owned is None:
            raise NotFound(
                "Assignment not found or you do not have access to it", code="ASSIGNMENT_NOT_FOUND"
            )

        stmt = (
            select(Submission)
            .options(selectinload(Submission.files), selectinload(Submission.student))
            .where(Submission.assignment_id == assignment_id)
            .order_by(Submission.submission_date.desc())
        )
        return [
            SubmissionDetail(
                id=s.id,
                assignment_id=s.assignment_id,
                student=UserSummary.model_validate(s.student),
                comment=s.comment,
                submission_date=s.submission_date,
                grade=s.grade,
                feedback=s.feedback,
                files=attachments_out(s.files),
            )
            for s in self.db.execute(stmt).scalars().all()
        ]

    def grade(self, identity: Identity, submission_id: str, data: GradeRequest) -> GradedSubmission:
        submission = self.db.execute(
            select(Submission)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .join(Classroom, Classroom.id == Assignment.class_id)
            .options(selectinload(Submission.student), selectinload(Submission.assignment))
            .where(Submission.id == submission_id, Classroom.teacher_id == identity.id)
        ).scalar_one_or_none()
        if submission is None:
            raise NotFound(
                "Submission not found or you do not have access to it", code="SUBMISSION_NOT_FOUND"
            )

        with transaction(self.db):
            submission.grade = data.grade
            submission.feedback = data.feedback or None

        notify("graded", submission_id=submission.id, student_id=submission.student_id, grade=data.grade)
        return GradedSubmission(
            id=submission.id,
            assignment_id=submission.assignment_id,
            assignment_title=submission.assignment.title,
            student_id=submission.student_id,
            student_name=submission.student.name,
            student_email=submission.student.email,
            submission_date=submission.submission_date,
            grade=submission.grade,
            feedback=submission.feedback,
        )
