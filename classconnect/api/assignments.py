"""Assignments, submissions and grading.

``/student`` is declared ahead of ``/{assignment_id}`` so it is not
captured as an id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from classconnect.access import class_member
from classconnect.api._forms import merge_uploads
from classconnect.dependencies import get_current_identity, get_db, get_storage, require_role
from classconnect.models import UserRole
from classconnect.schemas.assignments import (
    AssignmentCreate,
    AssignmentOut,
    GradedSubmission,
    GradeRequest,
    SubmissionDetail,
    SubmissionOut,
)
from classconnect.schemas.common import parse_schema
from classconnect.security import Identity
from classconnect.services.assignments import AssignmentService
from classconnect.storage import FileStorage

router = APIRouter()


def get_assignment_service(
    db: Session = Depends(get_db), storage: FileStorage = Depends(get_storage)
) -> AssignmentService:
    return AssignmentService(db, storage)


@router.get("/class/{class_id}", response_model=List[AssignmentOut])
async def list_class_assignments(
    class_id: str,
    identity: Identity = Depends(class_member),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_for_class(identity, class_id)


@router.get("/student", response_model=List[AssignmentOut])
async def list_my_assignments(
    identity: Identity = Depends(
        require_role(UserRole.STUDENT, "Only students can view their assignments")
    ),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_for_student(identity)


@router.get("/{assignment_id}", response_model=AssignmentOut)
async def get_assignment(
    assignment_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.get(identity, assignment_id)


@router.post("", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    class_id: Optional[str] = Form(None),
    topic_id: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
    attachments_list: Optional[List[UploadFile]] = File(None, alias="attachments[]"),
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can create assignments")),
    service: AssignmentService = Depends(get_assignment_service),
):
    data = parse_schema(
        AssignmentCreate,
        {
            "class_id": class_id,
            "topic_id": topic_id,
            "title": title,
            "description": description,
            "due_date": due_date,
        },
    )
    return await service.create(identity, data, merge_uploads(attachments, attachments_list))


@router.post(
    "/{assignment_id}/submit", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED
)
async def submit_assignment(
    assignment_id: str,
    comment: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    files_list: Optional[List[UploadFile]] = File(None, alias="files[]"),
    identity: Identity = Depends(require_role(UserRole.STUDENT, "Only students can submit assignments")),
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.submit(identity, assignment_id, comment, merge_uploads(files, files_list))


@router.get("/{assignment_id}/submissions", response_model=List[SubmissionDetail])
async def list_submissions(
    assignment_id: str,
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can view submissions")),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list_submissions(identity, assignment_id)


@router.post("/{submission_id}/grade", response_model=GradedSubmission)
async def grade_submission(
    submission_id: str,
    data: GradeRequest,
    identity: Identity = Depends(require_role(UserRole.TEACHER, "Only teachers can grade submissions")),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.grade(identity, submission_id, data)
