"""SQLAlchemy models. Importing this package registers every table."""

from classconnect.models.user import User, UserRole
from classconnect.models.career import Career, PRESET_CAREERS
from classconnect.models.classroom import Classroom, Enrollment, Topic
from classconnect.models.announcement import Announcement, AnnouncementAttachment
from classconnect.models.assignment import (
    Assignment,
    AssignmentAttachment,
    Submission,
    SubmissionFile,
)
from classconnect.models.material import Material, MaterialAttachment

__all__ = [
    "User",
    "UserRole",
    "Career",
    "PRESET_CAREERS",
    "Classroom",
    "Enrollment",
    "Topic",
    "Announcement",
    "AnnouncementAttachment",
    "Assignment",
    "AssignmentAttachment",
    "Submission",
    "SubmissionFile",
    "Material",
    "MaterialAttachment",
]
