"""Communication Models (Notifications & Messaging)"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.base import BaseModel, StatusMixin, enum_column_type
from app.models.enums import (
    ConversationCategory,
    MessagePriority,
    NotificationPriority,
    NotificationType,
    TargetAudience,
    UserRole,
)
from app.utils.time import get_utc_now


class Notification(BaseModel, StatusMixin):
    """
    Broadcast notification. The recipient ledger is materialized once at
    creation; afterwards only recipient read-state and ``is_active`` change.
    """
    __tablename__ = "notifications"

    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        enum_column_type(NotificationType, "notification_type"),
        default=NotificationType.GENERAL,
        nullable=False,
        index=True,
    )
    priority = Column(
        enum_column_type(NotificationPriority, "notification_priority"),
        default=NotificationPriority.MEDIUM,
        nullable=False,
    )

    # Targeting (kept for display; recipients are already resolved)
    target_audience = Column(
        enum_column_type(TargetAudience, "target_audience"),
        default=TargetAudience.ALL,
        nullable=False,
    )
    target_grade_id = Column(Integer, ForeignKey("grades.id", ondelete="SET NULL"), nullable=True)
    target_class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)

    attachments = Column(JSON, nullable=False, default=list)
    expires_at = Column(DateTime, nullable=True)
    action_url = Column(String(500), nullable=True)
    action_text = Column(String(100), nullable=True)

    # Author
    created_by = Column(Uuid(as_uuid=True), nullable=False, index=True)
    created_by_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
    created_by_name = Column(String(255), nullable=False)

    recipients = relationship(
        "NotificationRecipient",
        back_populates="notification",
        cascade="all, delete-orphan",
        order_by="NotificationRecipient.id",
    )

    __table_args__ = (
        Index("ix_notifications_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification {self.type} {self.title!r}>"


class NotificationRecipient(Base):
    """
    One recipient's read-state within a notification (a ledger entry).
    (notification_id, user_id, user_role) is unique, so a read update
    matches at most one row.
    """
    __tablename__ = "notification_recipients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    notification_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    user_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)

    notification = relationship("Notification", back_populates="recipients")

    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", "user_role", name="uq_notification_recipient"),
        CheckConstraint(
            "(is_read AND read_at IS NOT NULL) OR (NOT is_read AND read_at IS NULL)",
            name="ck_notification_recipient_read_at",
        ),
        Index("ix_notification_recipients_user", "user_id", "user_role", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<NotificationRecipient {self.user_role}:{self.user_id} {'read' if self.is_read else 'unread'}>"


class Conversation(BaseModel, StatusMixin):
    """
    Thread between parents, teachers and admins.
    ``last_message_*`` columns are a projection of the newest message, kept
    for list views and overwritten on every append.
    """
    __tablename__ = "conversations"

    subject = Column(String(255), nullable=False)
    category = Column(
        enum_column_type(ConversationCategory, "conversation_category"),
        default=ConversationCategory.GENERAL,
        nullable=False,
    )
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    last_message_content = Column(Text, nullable=True)
    last_message_sender_id = Column(Uuid(as_uuid=True), nullable=True)
    last_message_sender_name = Column(String(255), nullable=True)
    last_message_at = Column(DateTime, nullable=True)

    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationParticipant.id",
    )
    messages = relationship("Message", back_populates="conversation", cascade="all, delete-orphan")

    @property
    def last_message(self):
        if self.last_message_at is None:
            return None
        return {
            "content": self.last_message_content,
            "sender_id": self.last_message_sender_id,
            "sender_name": self.last_message_sender_name,
            "created_at": self.last_message_at,
        }

    def __repr__(self) -> str:
        return f"<Conversation {self.subject!r}>"


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
    name = Column(String(255), nullable=False)
    joined_at = Column(DateTime, default=get_utc_now, nullable=False)

    conversation = relationship("Conversation", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),
    )


class Message(BaseModel):
    """A single message in a conversation. Content is never edited."""
    __tablename__ = "messages"

    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id = Column(Uuid(as_uuid=True), nullable=False)
    sender_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)
    receiver_id = Column(Uuid(as_uuid=True), nullable=False)
    receiver_role = Column(enum_column_type(UserRole, "user_role"), nullable=False)

    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=False, default=list)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    priority = Column(
        enum_column_type(MessagePriority, "message_priority"),
        default=MessagePriority.MEDIUM,
        nullable=False,
    )
    category = Column(
        enum_column_type(ConversationCategory, "conversation_category"),
        default=ConversationCategory.GENERAL,
        nullable=False,
    )
    student_id = Column(Uuid(as_uuid=True), nullable=True)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
        Index("ix_messages_receiver_unread", "receiver_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Message {self.sender_role}->{self.receiver_role} {'read' if self.is_read else 'unread'}>"
