"""Topic payloads."""

from typing import Optional

from pydantic import field_validator

from classconnect.schemas.common import CamelModel, UtcDatetime, strip_required


class TopicCreate(CamelModel):
    class_id: str
    name: str
    description: Optional[str] = ""

    @field_validator("class_id", "name", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)


class TopicOut(CamelModel):
    id: str
    class_id: str
    name: str
    description: Optional[str] = None
    order_index: int
    created_at: UtcDatetime
    materials_count: int = 0
    assignments_count: int = 0
