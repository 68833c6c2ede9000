"""Unit tests for MessagingService guards (mocked session)."""

import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.messaging import ConversationCreate
from app.services.messaging_service import MessagingService


def _user(role: UserRole) -> User:
    return User(id=uuid4(), role=role, first_name="Test", last_name="User", email=f"{uuid4().hex}@x.com")


@pytest.mark.asyncio
async def test_create_conversation_with_self_rejected():
    db = AsyncMock(spec=AsyncSession)
    parent = _user(UserRole.PARENT)
    data = ConversationCreate(
        receiver_id=parent.id, receiver_role=UserRole.PARENT, subject="s", content="c"
    )

    with pytest.raises(BadRequestError):
        await MessagingService.create_conversation(db, parent, data)


@pytest.mark.asyncio
async def test_create_conversation_student_forbidden():
    db = AsyncMock(spec=AsyncSession)
    data = ConversationCreate(
        receiver_id=uuid4(), receiver_role=UserRole.TEACHER, subject="s", content="c"
    )

    with pytest.raises(ForbiddenError):
        await MessagingService.create_conversation(db, _user(UserRole.STUDENT), data)


@pytest.mark.asyncio
async def test_create_conversation_receiver_role_mismatch():
    db = AsyncMock(spec=AsyncSession)
    teacher = _user(UserRole.TEACHER)
    teacher.is_active = True
    data = ConversationCreate(
        receiver_id=teacher.id, receiver_role=UserRole.ADMIN, subject="s", content="c"
    )

    with patch("app.services.messaging_service.UserService.get_user_by_id", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = teacher
        with pytest.raises(NotFoundError):
            await MessagingService.create_conversation(db, _user(UserRole.PARENT), data)

    assert not db.add.called
