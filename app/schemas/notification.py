from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator
from uuid import UUID
from datetime import datetime

from app.models.enums import NotificationPriority, NotificationType, TargetAudience, UserRole


class Attachment(BaseModel):
    file_name: str
    file_url: str
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.GENERAL
    priority: NotificationPriority = NotificationPriority.MEDIUM
    target_audience: TargetAudience = TargetAudience.ALL
    target_grade_id: Optional[int] = None
    target_class_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    action_url: Optional[str] = Field(None, max_length=500)
    action_text: Optional[str] = Field(None, max_length=100)
    attachments: List[Attachment] = []

    @model_validator(mode="after")
    def check_target(self) -> "NotificationCreate":
        if self.target_audience == TargetAudience.SPECIFIC_GRADE and self.target_grade_id is None:
            raise ValueError("target_grade_id is required when targeting a specific grade")
        if self.target_audience == TargetAudience.SPECIFIC_CLASS and self.target_class_id is None:
            raise ValueError("target_class_id is required when targeting a specific class")
        return self


class NotificationCreated(BaseModel):
    id: UUID
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority
    target_audience: TargetAudience
    recipient_count: int


class RecipientEntry(BaseModel):
    """A ledger entry as stored"""
    user_id: UUID
    user_role: UserRole
    is_read: bool
    read_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NotificationItem(BaseModel):
    """A notification as seen by one recipient, with that recipient's read-state"""
    id: UUID
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority
    is_read: bool
    read_at: Optional[datetime] = None
    created_by: str
    created_by_role: UserRole
    created_at: datetime
    expires_at: Optional[datetime] = None
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    attachments: List[Attachment] = []


class MarkAllReadResult(BaseModel):
    updated_count: int


class UnreadCount(BaseModel):
    unread_count: int
