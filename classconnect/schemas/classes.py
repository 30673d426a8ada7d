"""Class payloads."""

from typing import Optional

from pydantic import field_validator

from classconnect.schemas.common import CamelModel, UtcDatetime, strip_required


class ClassCreate(CamelModel):
    name: str
    career_id: str
    semester: str
    description: Optional[str] = ""

    @field_validator("name", "career_id", "semester", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)


class ClassOut(CamelModel):
    id: str
    name: str
    description: str
    class_code: str
    career_id: str
    career_name: Optional[str] = None
    semester: str
    teacher_id: str
    teacher_name: Optional[str] = None
    students_count: Optional[int] = None
    created_at: UtcDatetime
