from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classconnect.access import class_member
from classconnect.dependencies import get_db, require_role
from classconnect.models import UserRole
from classconnect.schemas.topics import TopicCreate, TopicOut
from classconnect.security import Identity
from classconnect.services.topics import TopicService

router = APIRouter()


@router.get("/class/{class_id}", response_model=List[TopicOut])
async def list_topics(
    class_id: str,
    identity: Identity = Depends(class_member),
    db: Session = Depends(get_db),
):
    return TopicService(db).list_for_class(class_id)


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
async def create_topic(
    data: TopicCreate,
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can create topics")),
    db: Session = Depends(get_db),
):
    return TopicService(db).create(identity, data)
