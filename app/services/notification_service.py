"""Notification Service - broadcast creation and per-recipient read-state"""

from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.academic import Grade, SchoolClass
from app.models.communication import Notification, NotificationRecipient
from app.models.enums import NOTIFICATION_AUTHOR_ROLES, NotificationType, UserRole
from app.models.user import User
from app.schemas.notification import NotificationCreate, NotificationItem
from app.services.audience import load_directory, resolve_audience
from app.utils.time import get_utc_now, to_naive_utc

logger = logging.getLogger(__name__)


def _visible_filters(now):
    """Active and not yet expired; expiry only hides, it never deletes."""
    return (
        Notification.is_active.is_(True),
        or_(Notification.expires_at.is_(None), Notification.expires_at > now),
    )


class NotificationService:
    @staticmethod
    async def create_notification(
        db: AsyncSession,
        author: User,
        data: NotificationCreate,
    ) -> Notification:
        """
        Create a notification and materialize its full recipient ledger.

        The audience is resolved here and only here: users who join a grade
        or class later are not added.
        """
        if author.role not in NOTIFICATION_AUTHOR_ROLES:
            raise ForbiddenError("Only admins and teachers can create notifications")

        # Target ids must name existing rows
        if data.target_grade_id is not None and await db.get(Grade, data.target_grade_id) is None:
            raise NotFoundError("Grade not found")
        if data.target_class_id is not None and await db.get(SchoolClass, data.target_class_id) is None:
            raise NotFoundError("Class not found")

        directory = await load_directory(db)
        recipients = resolve_audience(
            data.target_audience,
            directory,
            target_grade_id=data.target_grade_id,
            target_class_id=data.target_class_id,
            exclude_user_id=author.id,
        )

        notification = Notification(
            title=data.title,
            message=data.message,
            type=data.type,
            priority=data.priority,
            target_audience=data.target_audience,
            target_grade_id=data.target_grade_id,
            target_class_id=data.target_class_id,
            expires_at=to_naive_utc(data.expires_at),
            action_url=data.action_url,
            action_text=data.action_text,
            attachments=[a.model_dump() for a in data.attachments],
            created_by=author.id,
            created_by_role=author.role,
            created_by_name=author.full_name,
            is_active=True,
            recipients=[
                NotificationRecipient(user_id=user_id, user_role=role, is_read=False, read_at=None)
                for user_id, role in recipients
            ],
        )
        db.add(notification)
        await db.commit()

        logger.info(
            "Notification created",
            extra={
                "notification_id": str(notification.id),
                "audience": data.target_audience.value,
                "recipient_count": len(recipients),
            },
        )
        return notification

    @staticmethod
    async def get_notification(db: AsyncSession, notification_id: UUID) -> Optional[Notification]:
        result = await db.execute(
            select(Notification)
            .options(selectinload(Notification.recipients))
            .where(Notification.id == notification_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: UUID,
        user_role: UserRole,
        page: int = 1,
        page_size: int = 10,
        unread_only: bool = False,
        notification_type: Optional[NotificationType] = None,
    ) -> Tuple[List[NotificationItem], int]:
        """Newest-first page of visible notifications addressed to this user, with the user's own read-state."""
        filters = [
            NotificationRecipient.user_id == user_id,
            NotificationRecipient.user_role == user_role,
            *_visible_filters(get_utc_now()),
        ]
        if unread_only:
            filters.append(NotificationRecipient.is_read.is_(False))
        if notification_type is not None:
            filters.append(Notification.type == notification_type)

        stmt = (
            select(Notification, NotificationRecipient)
            .join(NotificationRecipient, NotificationRecipient.notification_id == Notification.id)
            .where(*filters)
        )
        total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        items = [
            NotificationItem(
                id=notification.id,
                title=notification.title,
                message=notification.message,
                type=notification.type,
                priority=notification.priority,
                is_read=entry.is_read,
                read_at=entry.read_at,
                created_by=notification.created_by_name,
                created_by_role=notification.created_by_role,
                created_at=notification.created_at,
                expires_at=notification.expires_at,
                action_url=notification.action_url,
                action_text=notification.action_text,
                attachments=notification.attachments or [],
            )
            for notification, entry in result.all()
        ]
        return items, total or 0

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
        user_role: UserRole,
    ) -> bool:
        """
        Mark one ledger entry read.

        The filter includes ``is_read = false`` so the first read timestamp is
        kept on repeat calls. Returns whether an entry exists for this
        (notification, user, role), read before or not.
        """
        result = await db.execute(
            update(NotificationRecipient)
            .where(
                NotificationRecipient.notification_id == notification_id,
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.user_role == user_role,
                NotificationRecipient.is_read.is_(False),
            )
            .values(is_read=True, read_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            await db.commit()
            return True

        existing = await db.scalar(
            select(NotificationRecipient.id).where(
                NotificationRecipient.notification_id == notification_id,
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.user_role == user_role,
            )
        )
        return existing is not None

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: UUID, user_role: UserRole) -> int:
        """Mark every unread entry of this (user, role) read in one statement; returns rows changed."""
        result = await db.execute(
            update(NotificationRecipient)
            .where(
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.user_role == user_role,
                NotificationRecipient.is_read.is_(False),
            )
            .values(is_read=True, read_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        updated = result.rowcount or 0
        logger.info(
            "Notifications marked read",
            extra={"user_id": str(user_id), "user_role": user_role.value, "updated_count": updated},
        )
        return updated

    @staticmethod
    async def unread_count(db: AsyncSession, user_id: UUID, user_role: UserRole) -> int:
        count = await db.scalar(
            select(func.count())
            .select_from(NotificationRecipient)
            .join(Notification, Notification.id == NotificationRecipient.notification_id)
            .where(
                NotificationRecipient.user_id == user_id,
                NotificationRecipient.user_role == user_role,
                NotificationRecipient.is_read.is_(False),
                *_visible_filters(get_utc_now()),
            )
        )
        return count or 0

    @staticmethod
    async def get_ledger(db: AsyncSession, notification_id: UUID, actor: User) -> Notification:
        """Notification with its ledger; only the author or an admin may see who read it."""
        notification = await NotificationService.get_notification(db, notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if not actor.is_admin and notification.created_by != actor.id:
            raise ForbiddenError("Only the author or an admin can view recipients")
        return notification

    @staticmethod
    async def deactivate(db: AsyncSession, notification_id: UUID, actor: User) -> Notification:
        """Soft-deactivate; the notification and its ledger are kept."""
        notification = await db.get(Notification, notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if not actor.is_admin and notification.created_by != actor.id:
            raise ForbiddenError("Only the author or an admin can deactivate a notification")

        notification.is_active = False
        notification.updated_at = get_utc_now()
        await db.commit()
        logger.info("Notification deactivated", extra={"notification_id": str(notification_id)})
        return notification
