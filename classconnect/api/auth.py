"""Registration, login and the current user."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classconnect.config import Settings
from classconnect.dependencies import get_app_settings, get_current_identity, get_db
from classconnect.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserOut
from classconnect.security import Identity
from classconnect.services.auth import AuthService

router = APIRouter()


def get_auth_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_app_settings)
) -> AuthService:
    return AuthService(db, settings)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return service.register(data)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(data)


@router.get("/me", response_model=UserOut)
async def me(
    identity: Identity = Depends(get_current_identity),
    service: AuthService = Depends(get_auth_service),
):
    return service.me(identity)
