from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime

from app.models.enums import ForumAuthorRole


class ForumCategoryBrief(BaseModel):
    id: UUID
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class ForumCategoryResponse(ForumCategoryBrief):
    description: Optional[str] = None
    allow_student_posts: bool


class ForumTopicCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category_id: UUID
    tags: List[str] = []


class ForumTopicResponse(BaseModel):
    id: UUID
    title: str
    content: str
    category: ForumCategoryBrief
    author_id: UUID
    author_role: ForumAuthorRole
    author_name: str
    tags: List[str] = []
    is_sticky: bool
    is_locked: bool
    views: int
    replies: int
    last_reply_at: Optional[datetime] = None
    last_reply_by_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ForumPostCreate(BaseModel):
    content: str = Field(..., min_length=1)
    parent_post_id: Optional[UUID] = None


class ForumPostResponse(BaseModel):
    id: UUID
    topic_id: UUID
    parent_post_id: Optional[UUID] = None
    content: str
    author_id: UUID
    author_role: ForumAuthorRole
    author_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ForumPostThread(ForumPostResponse):
    """Top-level post with its direct replies, oldest first."""
    replies: List[ForumPostResponse] = []
