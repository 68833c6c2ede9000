"""Messaging endpoints - parent/teacher/admin conversations"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.messaging import (
    Contact,
    ConversationCreate,
    ConversationList,
    ConversationResponse,
    ConversationSummary,
    MessageResponse,
    MessageSend,
)
from app.schemas.responses import PaginationMeta, SuccessResponse
from app.services.messaging_service import MessagingService

router = APIRouter()


@router.get("/conversations", response_model=SuccessResponse[ConversationList])
async def list_conversations(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Active conversations of the current user with unread counts."""
    rows, total_unread = await MessagingService.list_conversations(
        db, current_user, limit=settings.CONVERSATION_LIST_LIMIT
    )
    conversations = []
    for conversation, unread in rows:
        summary = ConversationSummary.model_validate(conversation)
        summary.unread_count = unread
        conversations.append(summary)
    return SuccessResponse(data=ConversationList(conversations=conversations, total_unread=total_unread))


@router.post("/conversations", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_in: ConversationCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Start a conversation; the content becomes its first message."""
    conversation, message = await MessagingService.create_conversation(db, current_user, conversation_in)
    return SuccessResponse(
        data={
            "conversation": ConversationResponse.model_validate(conversation),
            "message": MessageResponse.model_validate(message),
        },
        message="Conversation created",
    )


@router.get("/conversations/{conversation_id}", response_model=SuccessResponse)
async def get_conversation(
    conversation_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.MESSAGES_PAGE_SIZE, ge=1, le=100),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Messages of a conversation, oldest first. Marks messages to the current user as read."""
    conversation, messages, total = await MessagingService.get_messages(
        db,
        deps.parse_path_id(conversation_id, "Conversation not found"),
        current_user,
        page=page,
        page_size=limit,
    )
    return SuccessResponse(
        data={
            "conversation": ConversationResponse.model_validate(conversation),
            "messages": [MessageResponse.model_validate(m) for m in messages],
            "meta": PaginationMeta.build(page, limit, total),
        }
    )


@router.post("/send", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_in: MessageSend,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Append a message to a conversation the current user takes part in."""
    conversation, message = await MessagingService.append_message(
        db,
        message_in.conversation_id,
        current_user,
        message_in.content,
        receiver_id=message_in.receiver_id,
        receiver_role=message_in.receiver_role,
        priority=message_in.priority,
        attachments=[a.model_dump() for a in message_in.attachments],
    )
    return SuccessResponse(
        data={
            "conversation": ConversationResponse.model_validate(conversation),
            "message": MessageResponse.model_validate(message),
        },
        message="Message sent",
    )


@router.post("/{message_id}/read", response_model=SuccessResponse)
async def mark_message_read(
    message_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    matched = await MessagingService.mark_message_read(
        db, deps.parse_path_id(message_id, "Message not found"), current_user.id
    )
    if not matched:
        raise NotFoundError("Message not found")
    return SuccessResponse(message="Message marked as read")


@router.get("/contacts", response_model=SuccessResponse)
async def list_contacts(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """People the current user can message."""
    contacts = await MessagingService.list_contacts(db, current_user)
    return SuccessResponse(data=[Contact.model_validate(c) for c in contacts])
