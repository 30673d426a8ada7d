"""Class announcements with optional attachments."""

import logging
from typing import List, Sequence

from fastapi import UploadFile
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from classconnect.access import ensure_class_access, ensure_class_owner, is_teacher_of
from classconnect.db import transaction
from classconnect.errors import Forbidden, NotFound
from classconnect.models import Announcement, AnnouncementAttachment
from classconnect.schemas.announcements import AnnouncementCreate, AnnouncementOut
from classconnect.security import Identity
from classconnect.services._common import attachments_out, notify
from classconnect.storage import FileStorage


logger = logging.getLogger(__name__)


class AnnouncementService:
    def __init__(self, db: Session, storage: FileStorage) -> None:
        self.db = db
        self.storage = storage

    def _to_out(self, announcement: Announcement) -> AnnouncementOut:
        author = announcement.author
        return AnnouncementOut(
            id=announcement.id,
            class_id=announcement.class_id,
            title=announcement.title,
            content=announcement.content,
            author_id=announcement.teacher_id,
            author_name=author.name if author else "",
            author_avatar=author.avatar_url if author else None,
            attachments=attachments_out(announcement.attachments),
            created_at=announcement.created_at,
        )

    def _load(self, announcement_id: str) -> Announcement:
        stmt = (
            select(Announcement)
            .options(selectinload(Announcement.attachments), selectinload(Announcement.author))
            .where(Announcement.id == announcement_id)
        )
        announcement = self.db.execute(stmt).scalar_one_or_none()
        if announcement is None:
            raise NotFound("Announcement not found", code="NOT_FOUND")
        return announcement

    def list_for_class(self, class_id: str) -> List[AnnouncementOut]:
        """Newest first."""

        stmt = (
            select(Announcement)
            .options(selectinload(Announcement.attachments), selectinload(Announcement.author))
            .where(Announcement.class_id == class_id)
            .order_by(Announcement.created_at.desc())
        )
        return [self._to_out(a) for a in self.db.execute(stmt).scalars().all()]

    def get(self, identity: Identity, announcement_id: str) -> AnnouncementOut:
        announcement = self._load(announcement_id)
        ensure_class_access(self.db, announcement.class_id, identity)
        return self._to_out(announcement)

    async def create(
        self, identity: Identity, data: AnnouncementCreate, uploads: Sequence[UploadFile]
    ) -> AnnouncementOut:
        ensure_class_owner(
            self.db, data.class_id, identity,
            "You do not have permission to create announcements for this class",
        )
        stored = await self.storage.store_uploads(uploads)

        with transaction(self.db, cleanup=[self.storage.cleanup_callback(stored)]):
            announcement = Announcement(
                class_id=data.class_id,
                teacher_id=identity.id,
                title=data.title,
                content=data.content,
            )
            self.db.add(announcement)
            self.db.flush()
            for position, f in enumerate(stored):
                self.db.add(
                    AnnouncementAttachment(
                        announcement_id=announcement.id,
                        file_name=f.original_name,
                        stored_name=f.stored_name,
                        file_url=f.url,
                        file_size=f.size,
                        file_type=f.mime_type,
                        position=position,
                    )
                )

        notify("announcement", class_id=data.class_id, title=data.title, attachments=len(stored))
        self.db.expire_all()
        return self._to_out(self._load(announcement.id))

    def delete(self, identity: Identity, announcement_id: str) -> None:
        """Remove the announcement and its attachments; files go after the commit."""

        announcement = self._load(announcement_id)
        is_author = announcement.teacher_id == identity.id
        if not is_author and not is_teacher_of(self.db, announcement.class_id, identity.id):
            raise Forbidden("You do not have permission to delete this announcement", code="ACCESS_DENIED")

        stored_names = [a.stored_name for a in announcement.attachments]
        with transaction(self.db):
            self.db.execute(
                delete(AnnouncementAttachment).where(
                    AnnouncementAttachment.announcement_id == announcement_id
                )
            )
            self.db.execute(delete(Announcement).where(Announcement.id == announcement_id))
        self.storage.delete_many(stored_names)
        logger.info("Announcement %s deleted by %s", announcement_id, identity.id)
