"""Forum Service - categories, topics and replies"""

from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.enums import FORUM_AUTHOR_ROLES, ForumAuthorRole, UserRole
from app.models.forum import ForumCategory, ForumPost, ForumTopic
from app.models.user import User
from app.schemas.forum import ForumPostCreate, ForumTopicCreate
from app.utils.time import get_utc_now

logger = logging.getLogger(__name__)


def _check_author(user: User) -> ForumAuthorRole:
    if user.role not in FORUM_AUTHOR_ROLES:
        raise ForbiddenError("Only students and teachers can post in the forum")
    return ForumAuthorRole(user.role.value)


class ForumService:
    @staticmethod
    async def list_categories(db: AsyncSession) -> List[ForumCategory]:
        result = await db.execute(
            select(ForumCategory)
            .where(ForumCategory.is_active.is_(True))
            .order_by(ForumCategory.name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_topics(
        db: AsyncSession,
        category_id: Optional[UUID] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Tuple[List[ForumTopic], int]:
        """Approved topics; sticky first, then by latest activity."""
        filters = [ForumTopic.is_approved.is_(True)]
        if category_id is not None:
            filters.append(ForumTopic.category_id == category_id)

        total = await db.scalar(select(func.count()).select_from(ForumTopic).where(*filters))
        result = await db.execute(
            select(ForumTopic)
            .options(selectinload(ForumTopic.category))
            .where(*filters)
            .order_by(
                ForumTopic.is_sticky.desc(),
                func.coalesce(ForumTopic.last_reply_at, ForumTopic.created_at).desc(),
                ForumTopic.id.desc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def get_topic(db: AsyncSession, topic_id: UUID) -> Optional[ForumTopic]:
        result = await db.execute(
            select(ForumTopic)
            .options(selectinload(ForumTopic.category))
            .where(ForumTopic.id == topic_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_topic(db: AsyncSession, author: User, data: ForumTopicCreate) -> ForumTopic:
        """
        Open a topic in an active category.

        Raises:
            ForbiddenError: author is not a student or teacher, or a student
                posts in a category closed to students
            NotFoundError: category unknown or inactive
        """
        author_role = _check_author(author)

        category = await db.get(ForumCategory, data.category_id)
        if not category or not category.is_active:
            raise NotFoundError("Category not found")
        if author.role == UserRole.STUDENT and not category.allow_student_posts:
            raise ForbiddenError("Students cannot post in this category")

        topic = ForumTopic(
            title=data.title,
            content=data.content,
            category_id=category.id,
            author_id=author.id,
            author_role=author_role,
            author_name=author.full_name,
            tags=data.tags,
        )
        db.add(topic)
        await db.commit()

        logger.info("Forum topic created", extra={"topic_id": str(topic.id), "category_id": str(category.id)})
        return await ForumService.get_topic(db, topic.id)

    @staticmethod
    async def view_topic(db: AsyncSession, topic_id: UUID) -> Optional[ForumTopic]:
        """
        Fetch a topic and count the view with a single ``views = views + 1``
        UPDATE. The returned topic includes this view; None if it does not exist.
        """
        result = await db.execute(
            update(ForumTopic)
            .where(ForumTopic.id == topic_id)
            .values(views=ForumTopic.views + 1, updated_at=ForumTopic.updated_at)
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            return None
        await db.commit()

        return await ForumService.get_topic(db, topic_id)

    @staticmethod
    async def list_posts(
        db: AsyncSession,
        topic_id: UUID,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[Tuple[ForumPost, List[ForumPost]]], int]:
        """A page of approved top-level posts, oldest first, each with its approved replies."""
        if await db.get(ForumTopic, topic_id) is None:
            raise NotFoundError("Topic not found")

        filters = (
            ForumPost.topic_id == topic_id,
            ForumPost.parent_post_id.is_(None),
            ForumPost.is_approved.is_(True),
        )
        total = await db.scalar(select(func.count()).select_from(ForumPost).where(*filters))
        result = await db.execute(
            select(ForumPost)
            .where(*filters)
            .order_by(ForumPost.created_at, ForumPost.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        posts = list(result.scalars().all())

        replies: Dict[UUID, List[ForumPost]] = {post.id: [] for post in posts}
        if replies:
            result = await db.execute(
                select(ForumPost)
                .where(
                    ForumPost.parent_post_id.in_(list(replies)),
                    ForumPost.is_approved.is_(True),
                )
                .order_by(ForumPost.created_at, ForumPost.id)
            )
            for reply in result.scalars().all():
                replies[reply.parent_post_id].append(reply)

        return [(post, replies[post.id]) for post in posts], total or 0

    @staticmethod
    async def create_post(
        db: AsyncSession,
        topic_id: UUID,
        author: User,
        data: ForumPostCreate,
    ) -> Tuple[ForumTopic, ForumPost]:
        """
        Post a reply and update the topic's counters.

        ``replies = replies + 1`` and the last-reply columns are written in
        one UPDATE, so concurrent replies are all counted.

        Raises:
            ForbiddenError: author is not a student or teacher, or the topic is locked
            NotFoundError: topic unknown, or the parent post is not in this topic
        """
        author_role = _check_author(author)

        topic = await db.get(ForumTopic, topic_id)
        if not topic:
            raise NotFoundError("Topic not found")
        if topic.is_locked:
            raise ForbiddenError("Topic is locked")
        if data.parent_post_id is not None:
            parent = await db.get(ForumPost, data.parent_post_id)
            if not parent or parent.topic_id != topic_id:
                raise NotFoundError("Post not found")

        now = get_utc_now()
        post = ForumPost(
            topic_id=topic_id,
            parent_post_id=data.parent_post_id,
            content=data.content,
            author_id=author.id,
            author_role=author_role,
            author_name=author.full_name,
            is_approved=True,
            created_at=now,
            updated_at=now,
        )
        db.add(post)
        await db.flush()

        await db.execute(
            update(ForumTopic)
            .where(ForumTopic.id == topic_id)
            .values(
                replies=ForumTopic.replies + 1,
                last_reply_at=now,
                last_reply_by=author.id,
                last_reply_by_name=author.full_name,
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        logger.info("Forum reply posted", extra={"topic_id": str(topic_id), "post_id": str(post.id)})
        return await ForumService.get_topic(db, topic_id), post
