from typing import Optional

from classconnect.schemas.common import CamelModel


class CareerOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
