"""Unit tests for ForumService guards (mocked session)."""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.enums import UserRole
from app.models.forum import ForumCategory, ForumTopic
from app.models.user import User
from app.schemas.forum import ForumPostCreate, ForumTopicCreate
from app.services.forum_service import ForumService


def _user(role: UserRole) -> User:
    return User(id=uuid4(), role=role, first_name="Test", last_name="User", email=f"{uuid4().hex}@x.com")


@pytest.mark.asyncio
async def test_reply_to_locked_topic_forbidden():
    db = AsyncMock(spec=AsyncSession)
    topic = ForumTopic(id=uuid4(), is_locked=True, replies=4)
    db.get.return_value = topic

    with pytest.raises(ForbiddenError):
        await ForumService.create_post(db, topic.id, _user(UserRole.STUDENT), ForumPostCreate(content="hi"))

    assert not db.add.called
    assert not db.execute.called
    assert topic.replies == 4


@pytest.mark.asyncio
async def test_admin_cannot_reply():
    db = AsyncMock(spec=AsyncSession)

    with pytest.raises(ForbiddenError):
        await ForumService.create_post(db, uuid4(), _user(UserRole.ADMIN), ForumPostCreate(content="hi"))

    assert not db.get.called


@pytest.mark.asyncio
async def test_reply_unknown_topic():
    db = AsyncMock(spec=AsyncSession)
    db.get.return_value = None

    with pytest.raises(NotFoundError):
        await ForumService.create_post(db, uuid4(), _user(UserRole.TEACHER), ForumPostCreate(content="hi"))


@pytest.mark.asyncio
async def test_inactive_category_not_found():
    db = AsyncMock(spec=AsyncSession)
    db.get.return_value = ForumCategory(id=uuid4(), name="Old", is_active=False)
    data = ForumTopicCreate(title="t", content="c", category_id=uuid4())

    with pytest.raises(NotFoundError):
        await ForumService.create_topic(db, _user(UserRole.TEACHER), data)

    assert not db.commit.called
