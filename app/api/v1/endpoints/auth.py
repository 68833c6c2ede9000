from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.core import security
from app.core.exceptions import UnauthenticatedError
from app.core.rate_limit import limiter
from app.models.user import User
from app.schemas.auth import CurrentUserResponse, LoginRequest, Token
from app.schemas.responses import SuccessResponse
from app.services.user_service import UserService

router = APIRouter()


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Unified login for all roles.
    Sets the session cookie and also returns the token for bearer-header clients.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise UnauthenticatedError("Incorrect email or password")

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(
        data={"sub": str(user.id), "role": user.role.value, "name": user.full_name},
        expires_delta=expires,
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=int(expires.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )

    return SuccessResponse(
        data=Token(
            access_token=access_token,
            token_type="bearer",
            role=user.role,
            user_id=str(user.id),
        ),
        message="Login successful"
    )


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> Any:
    """Clear the session cookie."""
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=SuccessResponse[CurrentUserResponse])
async def read_current_user(current_user: User = Depends(deps.get_current_user)) -> Any:
    return SuccessResponse(data=CurrentUserResponse.model_validate(current_user))
