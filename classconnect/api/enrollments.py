"""Enrollment management. Every route here is for the class teacher."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from classconnect.access import class_owner
from classconnect.dependencies import get_db, require_role
from classconnect.models import UserRole
from classconnect.schemas.common import MessageResponse, UserSummary
from classconnect.schemas.enrollments import EnrolledStudent, EnrollmentCreate, EnrollmentOut
from classconnect.security import Identity
from classconnect.services.enrollments import EnrollmentService

router = APIRouter()


@router.get("/search", response_model=List[UserSummary])
async def search_students(
    query: Optional[str] = Query(None),
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can search for students")),
    db: Session = Depends(get_db),
):
    return EnrollmentService(db).search_students(query)


@router.get("/class/{class_id}", response_model=List[EnrolledStudent])
async def list_enrolled_students(
    class_id: str,
    identity: Identity = Depends(class_owner),
    db: Session = Depends(get_db),
):
    return EnrollmentService(db).list_for_class(class_id)


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def enroll_student(
    data: EnrollmentCreate,
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can enroll students")),
    db: Session = Depends(get_db),
):
    return EnrollmentService(db).enroll(identity, data)


@router.delete("/{class_id}/{student_id}", response_model=MessageResponse)
async def remove_student(
    class_id: str,
    student_id: str,
    identity: Identity = Depends(class_owner),
    db: Session = Depends(get_db),
):
    EnrollmentService(db).unenroll(identity, class_id, student_id)
    return MessageResponse(message="Student removed from class successfully")
