"""Assignment, submission and grading payloads."""

import enum
import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from classconnect.errors import FieldError
from classconnect.models._common import as_utc
from classconnect.schemas.common import (
    AttachmentOut,
    CamelModel,
    UserSummary,
    UtcDatetime,
    strip_required,
)


_INTEGER_RE = re.compile(r"^\s*-?\d+\s*$")


class AssignmentStatus(str, enum.Enum):
    """Per-student status, derived at read time."""

    SUBMITTED = "submitted"
    EXPIRED = "expired"
    PENDING = "pending"


class AssignmentCreate(CamelModel):
    class_id: str
    topic_id: str
    title: str
    description: str
    due_date: datetime

    @field_validator("class_id", "topic_id", "title", "description", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise FieldError("Missing required fields", "MISSING_FIELDS")
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                return datetime.fromisoformat(text)
            except ValueError:
                raise FieldError("Due date is not a valid date", "INVALID_DUE_DATE") from None
        return value

    @field_validator("due_date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class GradeRequest(CamelModel):
    grade: Any = Field(default=None, validate_default=True)
    feedback: Optional[str] = None

    @field_validator("feedback", mode="before")
    @classmethod
    def _feedback_as_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("grade", mode="before")
    @classmethod
    def _valid_grade(cls, value: Any) -> int:
        error = FieldError("Grade must be an integer between 0 and 100", "INVALID_GRADE")
        if isinstance(value, bool) or value is None:
            raise error
        if isinstance(value, float):
            if not value.is_integer():
                raise error
            value = int(value)
        elif isinstance(value, str):
            if not _INTEGER_RE.match(value):
                raise error
            value = int(value)
        elif not isinstance(value, int):
            raise error
        if not 0 <= value <= 100:
            raise error
        return value


class AssignmentOut(CamelModel):
    id: str
    class_id: str
    class_name: Optional[str] = None
    topic_id: str
    topic_name: str
    title: str
    description: str
    due_date: UtcDatetime
    created_at: UtcDatetime
    attachments: List[AttachmentOut] = []
    # teacher view
    submissions_count: Optional[int] = None
    # student view
    status: Optional[AssignmentStatus] = None
    submission_date: Optional[UtcDatetime] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    submission_files: Optional[List[AttachmentOut]] = None


class SubmissionOut(CamelModel):
    id: str
    assignment_id: str
    student_id: str
    comment: Optional[str] = None
    submission_date: UtcDatetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
    files: List[AttachmentOut] = []


class SubmissionDetail(CamelModel):
    """Submission as the teacher sees it in the grading list."""

    id: str
    assignment_id: str
    student: UserSummary
    comment: Optional[str] = None
    submission_date: UtcDatetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
    files: List[AttachmentOut] = []


class GradedSubmission(CamelModel):
    id: str
    assignment_id: str
    assignment_title: str
    student_id: str
    student_name: str
    student_email: str
    submission_date: UtcDatetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
