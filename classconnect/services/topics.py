"""Topics inside a class."""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from classconnect.access import ensure_class_owner
from classconnect.models import Assignment, Material, Topic
from classconnect.schemas.topics import TopicCreate, TopicOut
from classconnect.security import Identity


logger = logging.getLogger(__name__)


class TopicService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_for_class(self, class_id: str) -> List[TopicOut]:
        """Topics in display order, with material and assignment counts."""

        materials = (
            select(func.count(Material.id))
            .where(Material.topic_id == Topic.id)
            .correlate(Topic)
            .scalar_subquery()
        )
        assignments = (
            select(func.count(Assignment.id))
            .where(Assignment.topic_id == Topic.id)
            .correlate(Topic)
            .scalar_subquery()
        )
        stmt = (
            select(Topic, materials, assignments)
            .where(Topic.class_id == class_id)
            .order_by(Topic.order_index)
        )
        result = []
        for topic, materials_count, assignments_count in self.db.execute(stmt).all():
            out = TopicOut.model_validate(topic)
            out.materials_count = materials_count
            out.assignments_count = assignments_count
            result.append(out)
        return result

    def next_order_index(self, class_id: str) -> int:
        current = self.db.execute(
            select(func.max(Topic.order_index)).where(Topic.class_id == class_id)
        ).scalar_one_or_none()
        return (current or 0) + 1

    def create(self, identity: Identity, data: TopicCreate) -> TopicOut:
        ensure_class_owner(
            self.db, data.class_id, identity,
            "You do not have permission to add topics to this class",
        )
        topic = Topic(
            class_id=data.class_id,
            name=data.name,
            description=data.description or "",
            order_index=self.next_order_index(data.class_id),
        )
        self.db.add(topic)
        self.db.commit()
        self.db.refresh(topic)
        logger.info("Topic %s added to class %s at position %d", topic.id, topic.class_id, topic.order_index)
        return TopicOut.model_validate(topic)
