"""Enrollment payloads."""

from pydantic import field_validator

from classconnect.schemas.common import CamelModel, UtcDatetime, UserSummary, strip_required


class EnrollmentCreate(CamelModel):
    class_id: str
    student_id: str

    @field_validator("class_id", "student_id", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)


class EnrolledStudent(UserSummary):
    enrollment_date: UtcDatetime


class EnrollmentOut(CamelModel):
    id: str
    class_id: str
    student: UserSummary
    enrollment_date: UtcDatetime
