from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classconnect.dependencies import get_current_identity, get_db
from classconnect.schemas.careers import CareerOut
from classconnect.services.careers import CareerService

router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("", response_model=List[CareerOut])
async def list_careers(db: Session = Depends(get_db)):
    return CareerService(db).list_careers()


@router.get("/{career_id}", response_model=CareerOut)
async def get_career(career_id: str, db: Session = Depends(get_db)):
    return CareerService(db).get_career(career_id)
