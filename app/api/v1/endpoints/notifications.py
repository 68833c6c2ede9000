"""Notification endpoints - inbox, broadcast creation and read tracking"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.core.exceptions import NotFoundError
from app.models.enums import NotificationType
from app.models.user import User
from app.schemas.notification import (
    MarkAllReadResult,
    NotificationCreate,
    NotificationCreated,
    NotificationItem,
    RecipientEntry,
    UnreadCount,
)
from app.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from app.services.notification_service import NotificationService

router = APIRouter()

NOT_FOUND = "Notification not found"


@router.get("", response_model=PaginatedResponse[NotificationItem])
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.NOTIFICATIONS_PAGE_SIZE, ge=1, le=100),
    unread_only: bool = Query(False),
    type: Optional[NotificationType] = Query(None),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Notifications addressed to the current user, newest first."""
    items, total = await NotificationService.list_for_user(
        db,
        current_user.id,
        current_user.role,
        page=page,
        page_size=limit,
        unread_only=unread_only,
        notification_type=type,
    )
    return PaginatedResponse(data=items, meta=PaginationMeta.build(page, limit, total))


@router.post("", response_model=SuccessResponse[NotificationCreated], status_code=status.HTTP_201_CREATED)
async def create_notification(
    notification_in: NotificationCreate,
    current_user: User = Depends(deps.require_notification_author),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create a notification. Admins and teachers only; recipients are resolved now."""
    notification = await NotificationService.create_notification(db, current_user, notification_in)
    return SuccessResponse(
        data=NotificationCreated(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            priority=notification.priority,
            target_audience=notification.target_audience,
            recipient_count=len(notification.recipients),
        ),
        message="Notification created successfully",
    )


@router.get("/unread-count", response_model=SuccessResponse[UnreadCount])
async def get_unread_count(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    count = await NotificationService.unread_count(db, current_user.id, current_user.role)
    return SuccessResponse(data=UnreadCount(unread_count=count))


@router.post("/mark-all-read", response_model=SuccessResponse[MarkAllReadResult])
async def mark_all_read(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Mark every unread notification of the current user read. Zero updates is not an error."""
    updated = await NotificationService.mark_all_read(db, current_user.id, current_user.role)
    return SuccessResponse(
        data=MarkAllReadResult(updated_count=updated),
        message="All notifications marked as read",
    )


@router.post("/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Mark one notification read for the current user."""
    matched = await NotificationService.mark_read(
        db, deps.parse_path_id(notification_id, NOT_FOUND), current_user.id, current_user.role
    )
    if not matched:
        raise NotFoundError(NOT_FOUND)
    return SuccessResponse(message="Notification marked as read")


@router.get("/{notification_id}/recipients", response_model=SuccessResponse)
async def get_notification_recipients(
    notification_id: str,
    current_user: User = Depends(deps.require_notification_author),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Recipient ledger with read-state. Author or admin only."""
    notification = await NotificationService.get_ledger(
        db, deps.parse_path_id(notification_id, NOT_FOUND), current_user
    )
    recipients = [RecipientEntry.model_validate(r) for r in notification.recipients]
    return SuccessResponse(
        data={
            "id": notification.id,
            "title": notification.title,
            "is_active": notification.is_active,
            "recipient_count": len(recipients),
            "read_count": sum(1 for r in recipients if r.is_read),
            "recipients": recipients,
        }
    )


@router.post("/{notification_id}/deactivate", response_model=SuccessResponse)
async def deactivate_notification(
    notification_id: str,
    current_user: User = Depends(deps.require_notification_author),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Hide a notification from every inbox without deleting it."""
    await NotificationService.deactivate(db, deps.parse_path_id(notification_id, NOT_FOUND), current_user)
    return SuccessResponse(message="Notification deactivated")
