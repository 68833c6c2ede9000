from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime

from app.models.enums import ConversationCategory, MessagePriority, UserRole
from app.schemas.notification import Attachment


class ConversationCreate(BaseModel):
    receiver_id: UUID
    receiver_role: UserRole
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: ConversationCategory = ConversationCategory.GENERAL
    student_id: Optional[UUID] = None


class MessageSend(BaseModel):
    conversation_id: UUID
    content: str = Field(..., min_length=1)
    receiver_id: Optional[UUID] = None
    receiver_role: Optional[UserRole] = None
    priority: MessagePriority = MessagePriority.MEDIUM
    attachments: List[Attachment] = []


class LastMessage(BaseModel):
    content: str
    sender_id: UUID
    sender_name: str
    created_at: datetime


class ParticipantResponse(BaseModel):
    user_id: UUID
    role: UserRole
    name: str
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    id: UUID
    subject: str
    category: ConversationCategory
    student_id: Optional[UUID] = None
    participants: List[ParticipantResponse] = []
    last_message: Optional[LastMessage] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(ConversationResponse):
    unread_count: int = 0


class ConversationList(BaseModel):
    conversations: List[ConversationSummary]
    total_unread: int


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_role: UserRole
    receiver_id: UUID
    receiver_role: UserRole
    subject: str
    content: str
    attachments: List[Attachment] = []
    is_read: bool
    read_at: Optional[datetime] = None
    priority: MessagePriority
    category: ConversationCategory
    student_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChildBrief(BaseModel):
    id: UUID
    name: str
    class_name: Optional[str] = None
    grade: Optional[str] = None


class Contact(BaseModel):
    id: UUID
    name: str
    role: UserRole
    email: str
    phone: Optional[str] = None
    children: List[ChildBrief] = []
