"""Study materials filed under topics."""

import logging
from typing import List, Sequence

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from classconnect.access import ensure_class_owner
from classconnect.db import transaction
from classconnect.errors import NotFound
from classconnect.models import Material, MaterialAttachment, Topic
from classconnect.schemas.materials import MaterialCreate, MaterialOut
from classconnect.security import Identity
from classconnect.services._common import attachments_out, notify
from classconnect.storage import FileStorage


logger = logging.getLogger(__name__)


class MaterialService:
    def __init__(self, db: Session, storage: FileStorage) -> None:
        self.db = db
        self.storage = storage

    def _to_out(self, material: Material) -> MaterialOut:
        return MaterialOut(
            id=material.id,
            class_id=material.class_id,
            topic_id=material.topic_id,
            topic_name=material.topic.name if material.topic else "",
            title=material.title,
            description=material.description,
            created_by=material.created_by,
            attachments=attachments_out(material.attachments),
            created_at=material.created_at,
        )

    def _query(self):
        return select(Material).options(
            selectinload(Material.attachments), selectinload(Material.topic)
        )

    def list_for_class(self, class_id: str) -> List[MaterialOut]:
        stmt = self._query().where(Material.class_id == class_id).order_by(Material.created_at.desc())
        return [self._to_out(m) for m in self.db.execute(stmt).scalars().all()]

    async def create(
        self, identity: Identity, data: MaterialCreate, uploads: Sequence[UploadFile]
    ) -> MaterialOut:
        ensure_class_owner(
            self.db, data.class_id, identity,
            "You do not have permission to create materials for this class",
        )
        topic = self.db.execute(
            select(Topic).where(Topic.id == data.topic_id, Topic.class_id == data.class_id)
        ).scalar_one_or_none()
        if topic is None:
            raise NotFound("Topic not found or does not belong to this class", code="TOPIC_NOT_FOUND")

        stored = await self.storage.store_uploads(uploads)
        with transaction(self.db, cleanup=[self.storage.cleanup_callback(stored)]):
            material = Material(
                class_id=data.class_id,
                topic_id=topic.id,
                title=data.title,
                description=data.description or None,
                created_by=identity.id,
            )
            for position, f in enumerate(stored):
                material.attachments.append(
                    MaterialAttachment(
                        file_name=f.original_name,
                        stored_name=f.stored_name,
                        file_url=f.url,
                        file_size=f.size,
                        file_type=f.mime_type,
                        position=position,
                    )
                )
            self.db.add(material)

        notify("material", class_id=data.class_id, topic_id=topic.id, title=data.title)
        self.db.expire_all()
        stmt = self._query().where(Material.id == material.id)
        return self._to_out(self.db.execute(stmt).scalar_one())
