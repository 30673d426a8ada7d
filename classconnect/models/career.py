"""Career reference data."""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from classconnect.db import Base
from classconnect.models._common import new_id


class Career(Base):
    """Degree programme a class belongs to. Seeded, read-only through the API."""

    __tablename__ = "careers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)


# Demo careers inserted by scripts/seed_demo_data.py
PRESET_CAREERS = [
    {
        "name": "Computer Systems Engineering",
        "description": "Software development, networks and computing infrastructure.",
    },
    {
        "name": "Business Administration",
        "description": "Management, finance and organisational leadership.",
    },
    {
        "name": "Industrial Engineering",
        "description": "Process optimisation, quality and operations.",
    },
    {
        "name": "Accounting",
        "description": "Financial reporting, auditing and taxation.",
    },
    {
        "name": "Mechatronics Engineering",
        "description": "Mechanics, electronics and control systems.",
    },
    {
        "name": "Psychology",
        "description": "Human behaviour, cognition and mental health.",
    },
]
