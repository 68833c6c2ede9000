"""API Dependencies"""

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ForbiddenError, NotFoundError, UnauthenticatedError
from app.core.security import decode_access_token
from app.database import get_db
from app.models.enums import NOTIFICATION_AUTHOR_ROLES, UserRole
from app.models.user import User
from app.services.user_service import UserService

# Bearer header is optional; the session cookie is the primary credential
security = HTTPBearer(auto_error=False)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Session token from the cookie, falling back to an Authorization: Bearer header."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise UnauthenticatedError("Unauthorized")
    return token


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(get_session_token),
) -> User:
    """
    Get current authenticated user from the session token.

    The token's signature and expiry are verified; the role claim must still
    match the stored user.

    Raises:
        UnauthenticatedError: token invalid, user unknown/inactive, or role mismatch
        TokenExpiredError: token past its expiry
    """
    payload = decode_access_token(token)

    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise UnauthenticatedError("Invalid user ID")

    user = await UserService.get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise UnauthenticatedError("Could not validate credentials")
    if payload.get("role") != user.role.value:
        raise UnauthenticatedError("Could not validate credentials")

    return user


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory: the current user must hold one of ``roles``."""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise ForbiddenError("Not enough permissions")
        return current_user

    return checker


require_notification_author = require_roles(*NOTIFICATION_AUTHOR_ROLES)


def parse_path_id(value: str, not_found: str) -> UUID:
    """
    Parse an opaque path identifier.

    A string that is not a UUID cannot name any row, so it is reported the
    same way as a well-formed id that matches nothing.
    """
    try:
        return UUID(value)
    except ValueError:
        raise NotFoundError(not_found)
