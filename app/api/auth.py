# /auth/* - registration, login and profile

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import CurrentUser, get_current_user, get_settings
from app.core.config import Settings
from app.core.database import get_db
from app.schemas.account import AuthResponse, LoginRequest, ProfileResponse, RegisterRequest, UserOut
from app.services.accounts import AccountService, EmailAlreadyRegistered, InvalidCredentials
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
        data: RegisterRequest,
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_settings)
):
    """Create a user together with their organization and a starter dashboard"""
    try:
        user, token = await AccountService(db, settings).register(data)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists"
        )
    except SQLAlchemyError as e:
        logger.error("registration_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create account"
        )

    return AuthResponse(message="Account created successfully", token=token, user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
        data: LoginRequest,
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_settings)
):
    try:
        user, token = await AccountService(db, settings).login(data)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
    except SQLAlchemyError as e:
        logger.error("login_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

    return AuthResponse(token=token, user=UserOut.model_validate(user))


@router.get("/me", response_model=ProfileResponse)
async def me(
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_settings)
):
    try:
        profile = await AccountService(db, settings).get_profile(user.id)
    except SQLAlchemyError as e:
        logger.error("profile_fetch_failed", user_id=user.id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch profile"
        )

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return profile
