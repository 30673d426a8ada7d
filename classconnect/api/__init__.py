"""API router package."""

from fastapi import APIRouter

from classconnect.api import (
    announcements,
    assignments,
    auth,
    careers,
    classes,
    enrollments,
    materials,
    topics,
)

router = APIRouter(prefix="/api")

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(careers.router, prefix="/careers", tags=["careers"])
router.include_router(classes.router, prefix="/classes", tags=["classes"])
router.include_router(topics.router, prefix="/topics", tags=["topics"])
router.include_router(enrollments.router, prefix="/enrollments", tags=["enrollments"])
router.include_router(announcements.router, prefix="/announcements", tags=["announcements"])
router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
router.include_router(materials.router, prefix="/materials", tags=["materials"])
