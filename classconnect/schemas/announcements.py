"""Announcement payloads."""

from typing import List, Optional

from pydantic import field_validator

from classconnect.schemas.common import AttachmentOut, CamelModel, UtcDatetime, strip_required


class AnnouncementCreate(CamelModel):
    class_id: str
    title: str
    content: str

    @field_validator("class_id", "title", "content", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)


class AnnouncementOut(CamelModel):
    id: str
    class_id: str
    title: str
    content: str
    author_id: str
    author_name: str
    author_avatar: Optional[str] = None
    attachments: List[AttachmentOut] = []
    created_at: UtcDatetime
