"""Unit tests for notification and messaging request schemas."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.models.enums import (
    ConversationCategory,
    MessagePriority,
    NotificationPriority,
    NotificationType,
    TargetAudience,
    UserRole,
)
from app.schemas.messaging import ConversationCreate, ConversationResponse, MessageSend
from app.schemas.notification import NotificationCreate


def test_notification_create_defaults():
    data = NotificationCreate(title="Sports day", message="Friday, 9am on the field")
    assert data.type == NotificationType.GENERAL
    assert data.priority == NotificationPriority.MEDIUM
    assert data.target_audience == TargetAudience.ALL
    assert data.attachments == []


def test_notification_create_requires_title_and_message():
    with pytest.raises(ValidationError):
        NotificationCreate(title="", message="body")
    with pytest.raises(ValidationError):
        NotificationCreate(title="Title")


def test_specific_class_requires_class_id():
    with pytest.raises(ValidationError) as exc_info:
        NotificationCreate(title="Trip", message="Bring lunch", target_audience=TargetAudience.SPECIFIC_CLASS)
    assert "target_class_id" in str(exc_info.value)


def test_specific_grade_requires_grade_id():
    with pytest.raises(ValidationError):
        NotificationCreate(title="Exam", message="Room 4", target_audience=TargetAudience.SPECIFIC_GRADE)


def test_specific_class_with_class_id():
    data = NotificationCreate(
        title="Trip",
        message="Bring lunch",
        target_audience="SPECIFIC_CLASS",
        target_class_id=3,
    )
    assert data.target_audience == TargetAudience.SPECIFIC_CLASS
    assert data.target_class_id == 3


def test_unknown_audience_rejected():
    with pytest.raises(ValidationError):
        NotificationCreate(title="t", message="m", target_audience="EVERYONE")


def test_attachment_size_non_negative():
    with pytest.raises(ValidationError):
        NotificationCreate(
            title="t",
            message="m",
            attachments=[{"file_name": "a.pdf", "file_url": "https://files.example.com/a.pdf", "file_size": -1}],
        )


def test_conversation_create():
    data = ConversationCreate(
        receiver_id=uuid4(),
        receiver_role="teacher",
        subject="Homework",
        content="Question about the maths homework",
    )
    assert data.receiver_role == UserRole.TEACHER
    assert data.category == ConversationCategory.GENERAL


def test_message_send_defaults():
    data = MessageSend(conversation_id=uuid4(), content="Thanks")
    assert data.priority == MessagePriority.MEDIUM
    assert data.receiver_id is None


def test_message_send_rejects_empty_content():
    with pytest.raises(ValidationError):
        MessageSend(conversation_id=uuid4(), content="")


def test_conversation_response_without_messages_has_no_last_message():
    conversation = {
        "id": uuid4(),
        "subject": "Homework",
        "category": "GENERAL",
        "participants": [],
        "last_message": None,
        "is_active": True,
        "created_at": "2026-03-01T08:00:00",
        "updated_at": "2026-03-01T08:00:00",
    }
    assert ConversationResponse.model_validate(conversation).last_message is None
