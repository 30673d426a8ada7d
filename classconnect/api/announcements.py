"""Announcement endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from classconnect.access import class_member
from classconnect.api._forms import merge_uploads
from classconnect.dependencies import get_current_identity, get_db, get_storage, require_role
from classconnect.models import UserRole
from classconnect.schemas.announcements import AnnouncementCreate, AnnouncementOut
from classconnect.schemas.common import MessageResponse, parse_schema
from classconnect.security import Identity
from classconnect.services.announcements import AnnouncementService
from classconnect.storage import FileStorage

router = APIRouter()


def get_announcement_service(
    db: Session = Depends(get_db), storage: FileStorage = Depends(get_storage)
) -> AnnouncementService:
    return AnnouncementService(db, storage)


@router.get("/class/{class_id}", response_model=List[AnnouncementOut])
async def list_announcements(
    class_id: str,
    identity: Identity = Depends(class_member),
    service: AnnouncementService = Depends(get_announcement_service),
):
    return service.list_for_class(class_id)


@router.get("/{announcement_id}", response_model=AnnouncementOut)
async def get_announcement(
    announcement_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AnnouncementService = Depends(get_announcement_service),
):
    return service.get(identity, announcement_id)


@router.post("", response_model=AnnouncementOut, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    class_id: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
    attachments_list: Optional[List[UploadFile]] = File(None, alias="attachments[]"),
    identity: Identity = Depends(
        require_role(UserRole.TEACHER, "Only teachers can create announcements")
    ),
    service: AnnouncementService = Depends(get_announcement_service),
):
    data = parse_schema(
        AnnouncementCreate, {"class_id": class_id, "title": title, "content": content}
    )
    return await service.create(identity, data, merge_uploads(attachments, attachments_list))


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AnnouncementService = Depends(get_announcement_service),
):
    service.delete(identity, announcement_id)
    return MessageResponse(message="Announcement deleted successfully")
