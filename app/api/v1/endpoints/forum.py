from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.forum import (
    ForumCategoryResponse,
    ForumPostCreate,
    ForumPostResponse,
    ForumPostThread,
    ForumTopicCreate,
    ForumTopicResponse,
)
from app.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from app.services.forum_service import ForumService

router = APIRouter()

TOPIC_NOT_FOUND = "Topic not found"


@router.get("/categories", response_model=SuccessResponse[List[ForumCategoryResponse]])
async def list_categories(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    categories = await ForumService.list_categories(db)
    return SuccessResponse(data=[ForumCategoryResponse.model_validate(c) for c in categories])


@router.get("/topics", response_model=PaginatedResponse[ForumTopicResponse])
async def list_topics(
    category_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.FORUM_TOPICS_PAGE_SIZE, ge=1, le=100),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Approved topics, sticky ones first, then most recently active."""
    topics, total = await ForumService.list_topics(db, category_id=category_id, page=page, page_size=limit)
    return PaginatedResponse(
        data=[ForumTopicResponse.model_validate(t) for t in topics],
        meta=PaginationMeta.build(page, limit, total),
    )


@router.post("/topics", response_model=SuccessResponse[ForumTopicResponse], status_code=status.HTTP_201_CREATED)
async def create_topic(
    topic_in: ForumTopicCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Open a topic. Students and teachers only."""
    topic = await ForumService.create_topic(db, current_user, topic_in)
    return SuccessResponse(data=ForumTopicResponse.model_validate(topic), message="Topic created")


@router.get("/topics/{topic_id}", response_model=SuccessResponse[ForumTopicResponse])
async def get_topic(
    topic_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Fetch a forum topic and count the view."""
    topic = await ForumService.view_topic(db, deps.parse_path_id(topic_id, TOPIC_NOT_FOUND))
    if not topic:
        raise NotFoundError(TOPIC_NOT_FOUND)
    return SuccessResponse(data=ForumTopicResponse.model_validate(topic))


@router.get("/topics/{topic_id}/posts", response_model=PaginatedResponse[ForumPostThread])
async def list_posts(
    topic_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.FORUM_POSTS_PAGE_SIZE, ge=1, le=100),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    threads, total = await ForumService.list_posts(
        db, deps.parse_path_id(topic_id, TOPIC_NOT_FOUND), page=page, page_size=limit
    )
    data = []
    for post, replies in threads:
        thread = ForumPostThread.model_validate(post)
        thread.replies = [ForumPostResponse.model_validate(r) for r in replies]
        data.append(thread)
    return PaginatedResponse(data=data, meta=PaginationMeta.build(page, limit, total))


@router.post("/topics/{topic_id}/posts", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    topic_id: str,
    post_in: ForumPostCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Reply in a topic. Refused on locked topics."""
    topic, post = await ForumService.create_post(
        db, deps.parse_path_id(topic_id, TOPIC_NOT_FOUND), current_user, post_in
    )
    return SuccessResponse(
        data={
            "post": ForumPostResponse.model_validate(post),
            "topic": ForumTopicResponse.model_validate(topic),
        },
        message="Reply posted",
    )
