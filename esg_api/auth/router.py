"""Auth API router: register, login, profile."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from esg_api.auth.dependencies import get_db_user
from esg_api.core.database import get_db
from esg_api.core.security import create_access_token, hash_password, verify_password
from esg_api.models.core import User
from esg_api.schemas.auth import (
    AuthTokenResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserProfileResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def _profile(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        name=user.full_name,
        email=user.email,
        created_at=user.created_at,
    )


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    email = body.email.lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )

    user = User(
        email=email,
        full_name=body.name.strip(),
        password_hash=hash_password(body.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("user_registered", user_id=str(user.id))
    return AuthTokenResponse(token=create_access_token(str(user.id)), user=_profile(user))


@router.post("/login", response_model=AuthTokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(User).where(User.email == body.email.lower(), User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("user_logged_in", user_id=str(user.id))
    return AuthTokenResponse(token=create_access_token(str(user.id)), user=_profile(user))


@router.get("/me", response_model=UserProfileResponse)
async def get_me(user: User = Depends(get_db_user)):
    """Return the current user's profile."""
    return _profile(user)


@router.put("/profile", response_model=UserProfileResponse)
async def update_profile(
    body: UpdateProfileRequest,
    user: User = Depends(get_db_user),
    db: AsyncSession = Depends(get_db),
):
    """Update display name and/or password. A new password needs the current one."""
    if body.new_password is not None:
        if not body.current_password or not verify_password(
            body.current_password, user.password_hash
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect",
            )
        user.password_hash = hash_password(body.new_password)

    if body.name is not None:
        user.full_name = body.name.strip()

    await db.commit()
    await db.refresh(user)
    logger.info("user_profile_updated", user_id=str(user.id))
    return _profile(user)
