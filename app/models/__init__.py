"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel, StatusMixin
from app.models.enums import *
from app.models.academic import Grade, SchoolClass
from app.models.user import User
from app.models.communication import (
    Notification,
    NotificationRecipient,
    Conversation,
    ConversationParticipant,
    Message,
)
from app.models.forum import ForumCategory, ForumPost, ForumTopic


__all__ = [
    # Base classes
    "BaseModel",
    "StatusMixin",

    # Directory
    "Grade",
    "SchoolClass",
    "User",

    # Communication
    "Notification",
    "NotificationRecipient",
    "Conversation",
    "ConversationParticipant",
    "Message",

    # Forum
    "ForumCategory",
    "ForumTopic",
    "ForumPost",
]
