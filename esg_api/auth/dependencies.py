"""FastAPI auth dependencies: get_current_user, get_db_user."""

import uuid

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from esg_api.core.database import get_db
from esg_api.core.security import decode_access_token
from esg_api.models.core import User
from esg_api.schemas.auth import CurrentUser

logger = structlog.get_logger()

# auto_error=False: a missing header must be a 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_token_subject(credentials: HTTPAuthorizationCredentials | None) -> uuid.UUID:
    """Verify the bearer token and return the user id it names. No DB access."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("jwt_verification_failed", error=str(e))
        raise _unauthorized("Invalid or expired token") from e

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Token missing subject claim")
    try:
        return uuid.UUID(str(subject))
    except ValueError as e:
        raise _unauthorized("Token subject is not a user id") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Verify the HS256 JWT and resolve the user.

    The token is checked before any query runs, so unauthenticated requests
    never reach the database. Always checks is_active.
    """
    user_id = resolve_token_subject(credentials)

    stmt = select(User).where(User.id == user_id, User.is_active.is_(True))
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None:
        logger.warning("user_not_found_for_token", user_id=str(user_id))
        raise _unauthorized("User not found or inactive")

    sentry_sdk.set_user({"id": str(user.id)})

    return CurrentUser(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
    )


async def get_db_user(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the full SQLAlchemy User model. Use when you need the complete record."""
    stmt = select(User).where(User.id == current_user.user_id)
    result = await db.execute(stmt)
    return result.scalar_one()
