"""Class endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classconnect.dependencies import get_current_identity, get_db, require_role
from classconnect.models import UserRole
from classconnect.schemas.classes import ClassCreate, ClassOut
from classconnect.security import Identity
from classconnect.services.classes import ClassService

router = APIRouter()


@router.get("", response_model=List[ClassOut])
async def list_classes(
    identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)
):
    """Own classes for teachers, enrolled classes for students."""
    return ClassService(db).list_for(identity)


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can create classes")),
    db: Session = Depends(get_db),
):
    return ClassService(db).create(identity, data)


@router.get("/{class_id}", response_model=ClassOut)
async def get_class(
    class_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ClassService(db).get(identity, class_id)
