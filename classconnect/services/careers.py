from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from classconnect.errors import NotFound
from classconnect.models import Career
from classconnect.schemas.careers import CareerOut


class CareerService:
    """Read-only access to the seeded careers."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_careers(self) -> List[CareerOut]:
        careers = self.db.execute(select(Career).order_by(Career.name)).scalars().all()
        return [CareerOut.model_validate(c) for c in careers]

    def get_career(self, career_id: str) -> CareerOut:
        career = self.db.get(Career, career_id)
        if career is None:
            raise NotFound("Career not found", code="NOT_FOUND")
        return CareerOut.model_validate(career)
