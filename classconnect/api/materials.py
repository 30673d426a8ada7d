from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from classconnect.access import class_member
from classconnect.api._forms import merge_uploads
from classconnect.dependencies import get_db, get_storage, require_role
from classconnect.models import UserRole
from classconnect.schemas.common import parse_schema
from classconnect.schemas.materials import MaterialCreate, MaterialOut
from classconnect.security import Identity
from classconnect.services.materials import MaterialService
from classconnect.storage import FileStorage

router = APIRouter()


def get_material_service(
    db: Session = Depends(get_db), storage: FileStorage = Depends(get_storage)
) -> MaterialService:
    return MaterialService(db, storage)


@router.get("/class/{class_id}", response_model=List[MaterialOut])
async def list_materials(
    class_id: str,
    identity: Identity = Depends(class_member),
    service: MaterialService = Depends(get_material_service),
):
    return service.list_for_class(class_id)


@router.post("", response_model=MaterialOut, status_code=status.HTTP_201_CREATED)
async def create_material(
    class_id: Optional[str] = Form(None),
    topic_id: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
    attachments_list: Optional[List[UploadFile]] = File(None, alias="attachments[]"),
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can create materials")),
    service: MaterialService = Depends(get_material_service),
):
    data = parse_schema(
        MaterialCreate,
        {"class_id": class_id, "topic_id": topic_id, "title": title, "description": description},
    )
    return await service.create(identity, data, merge_uploads(attachments, attachments_list))
