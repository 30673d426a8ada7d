"""Material payloads."""

from typing import List, Optional

from pydantic import field_validator

from classconnect.schemas.common import AttachmentOut, CamelModel, UtcDatetime, strip_required


class MaterialCreate(CamelModel):
    class_id: str
    topic_id: str
    title: str
    description: Optional[str] = None

    @field_validator("class_id", "topic_id", "title", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)


class MaterialOut(CamelModel):
    id: str
    class_id: str
    topic_id: str
    topic_name: str
    title: str
    description: Optional[str] = None
    created_by: str
    attachments: List[AttachmentOut] = []
    created_at: UtcDatetime
