"""Demo reference data: careers and a few ready-to-use accounts."""

import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from classconnect.models import PRESET_CAREERS, Career, User, UserRole
from classconnect.security import hash_password


logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"name": "Demo Teacher", "email": "teacher@example.com", "role": UserRole.TEACHER},
    {"name": "Demo Student", "email": "student@example.com", "role": UserRole.STUDENT},
    {"name": "Second Student", "email": "student2@example.com", "role": UserRole.STUDENT},
]


def seed_careers(db: Session) -> int:
    existing = set(db.execute(select(Career.name)).scalars().all())
    created = 0
    for item in PRESET_CAREERS:
        if item["name"] in existing:
            continue
        db.add(Career(name=item["name"], description=item["description"]))
        created += 1
    return created


def seed_users(db: Session, password: str = DEMO_PASSWORD) -> int:
    existing = set(db.execute(select(User.email)).scalars().all())
    created = 0
    for item in DEMO_USERS:
        if item["email"] in existing:
            continue
        db.add(
            User(
                name=item["name"],
                email=item["email"],
                password_hash=hash_password(password),
                role=item["role"],
            )
        )
        created += 1
    return created


def seed_demo_data(db: Session) -> Dict[str, int]:
    """Insert whatever demo rows are missing. Safe to run repeatedly."""

    counts = {"careers": seed_careers(db), "users": seed_users(db)}
    db.flush()
    logger.info("Seeded %(careers)d careers and %(users)d users", counts)
    return counts
