"""initial schema: directory, notifications with recipient ledger, messaging, forum

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "user_role": ("admin", "teacher", "student", "parent"),
    "notification_type": ("ANNOUNCEMENT", "ASSIGNMENT", "EXAM", "ATTENDANCE", "FEE", "GENERAL", "URGENT"),
    "notification_priority": ("LOW", "MEDIUM", "HIGH", "URGENT"),
    "target_audience": ("ALL", "STUDENTS", "TEACHERS", "PARENTS", "SPECIFIC_GRADE", "SPECIFIC_CLASS"),
    "conversation_category": (
        "GENERAL", "ACADEMIC", "DISCIPLINE", "ATTENDANCE", "FEES", "HEALTH", "TRANSPORT", "OTHER",
    ),
    "message_priority": ("LOW", "MEDIUM", "HIGH"),
    "forum_author_role": ("student", "teacher"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list:
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    for name, values in ENUMS.items():
        quoted = ", ".join(f"'{v}'" for v in values)
        op.execute(f"CREATE TYPE {name} AS ENUM ({quoted})")

    op.create_table(
        "grades",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("level"),
    )

    op.create_table(
        "classes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("grade_id", sa.Integer(), nullable=False),
        sa.Column("supervisor_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["grade_id"], ["grades.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_classes_grade_id"), "classes", ["grade_id"], unique=False)
    op.create_index(op.f("ix_classes_supervisor_id"), "classes", ["supervisor_id"], unique=False)

    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("grade_id", sa.Integer(), nullable=True),
        sa.Column("class_id", sa.Integer(), nullable=True),
        sa.Column("parent_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["grade_id"], ["grades.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_is_active"), "users", ["is_active"], unique=False)
    op.create_index(op.f("ix_users_grade_id"), "users", ["grade_id"], unique=False)
    op.create_index(op.f("ix_users_class_id"), "users", ["class_id"], unique=False)
    op.create_index(op.f("ix_users_parent_id"), "users", ["parent_id"], unique=False)

    op.create_foreign_key(
        "fk_classes_supervisor_id",
        "classes",
        "users",
        ["supervisor_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "notifications",
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", _enum("notification_type"), nullable=False),
        sa.Column("priority", _enum("notification_priority"), nullable=False),
        sa.Column("target_audience", _enum("target_audience"), nullable=False),
        sa.Column("target_grade_id", sa.Integer(), nullable=True),
        sa.Column("target_class_id", sa.Integer(), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("action_text", sa.String(100), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=False),
        sa.Column("created_by_role", _enum("user_role"), nullable=False),
        sa.Column("created_by_name", sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(["target_grade_id"], ["grades.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["target_class_id"], ["classes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_id"), "notifications", ["id"], unique=False)
    op.create_index(op.f("ix_notifications_type"), "notifications", ["type"], unique=False)
    op.create_index(op.f("ix_notifications_is_active"), "notifications", ["is_active"], unique=False)
    op.create_index(op.f("ix_notifications_created_by"), "notifications", ["created_by"], unique=False)
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"], unique=False)

    op.create_table(
        "notification_recipients",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("notification_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("user_role", _enum("user_role"), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["notification_id"], ["notifications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("notification_id", "user_id", "user_role", name="uq_notification_recipient"),
        sa.CheckConstraint(
            "(is_read AND read_at IS NOT NULL) OR (NOT is_read AND read_at IS NULL)",
            name="ck_notification_recipient_read_at",
        ),
    )
    op.create_index(
        "ix_notification_recipients_user",
        "notification_recipients",
        ["user_id", "user_role", "is_read"],
        unique=False,
    )

    op.create_table(
        "conversations",
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("category", _enum("conversation_category"), nullable=False),
        sa.Column("student_id", sa.UUID(), nullable=True),
        sa.Column("last_message_content", sa.Text(), nullable=True),
        sa.Column("last_message_sender_id", sa.UUID(), nullable=True),
        sa.Column("last_message_sender_name", sa.String(255), nullable=True),
        sa.Column("last_message_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_conversations_id"), "conversations", ["id"], unique=False)
    op.create_index(op.f("ix_conversations_is_active"), "conversations", ["is_active"], unique=False)

    op.create_table(
        "conversation_participants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),
    )
    op.create_index(
        op.f("ix_conversation_participants_conversation_id"),
        "conversation_participants",
        ["conversation_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_conversation_participants_user_id"),
        "conversation_participants",
        ["user_id"],
        unique=False,
    )

    op.create_table(
        "messages",
        *_timestamps(),
        sa.Column("conversation_id", sa.UUID(), nullable=False),
        sa.Column("sender_id", sa.UUID(), nullable=False),
        sa.Column("sender_role", _enum("user_role"), nullable=False),
        sa.Column("receiver_id", sa.UUID(), nullable=False),
        sa.Column("receiver_role", _enum("user_role"), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("priority", _enum("message_priority"), nullable=False),
        sa.Column("category", _enum("conversation_category"), nullable=False),
        sa.Column("student_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_messages_id"), "messages", ["id"], unique=False)
    op.create_index("ix_messages_conversation_created", "messages", ["conversation_id", "created_at"], unique=False)
    op.create_index("ix_messages_receiver_unread", "messages", ["receiver_id", "is_read"], unique=False)

    op.create_table(
        "forum_categories",
        *_timestamps(),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("allow_student_posts", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_forum_categories_id"), "forum_categories", ["id"], unique=False)
    op.create_index(op.f("ix_forum_categories_is_active"), "forum_categories", ["is_active"], unique=False)

    op.create_table(
        "forum_topics",
        *_timestamps(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category_id", sa.UUID(), nullable=False),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("author_role", _enum("forum_author_role"), nullable=False),
        sa.Column("author_name", sa.String(255), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_sticky", sa.Boolean(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("replies", sa.Integer(), nullable=False),
        sa.Column("last_reply_at", sa.DateTime(), nullable=True),
        sa.Column("last_reply_by", sa.UUID(), nullable=True),
        sa.Column("last_reply_by_name", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["forum_categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_forum_topics_id"), "forum_topics", ["id"], unique=False)
    op.create_index(op.f("ix_forum_topics_author_id"), "forum_topics", ["author_id"], unique=False)
    op.create_index("ix_forum_topics_category_created", "forum_topics", ["category_id", "created_at"], unique=False)

    op.create_table(
        "forum_posts",
        *_timestamps(),
        sa.Column("topic_id", sa.UUID(), nullable=False),
        sa.Column("parent_post_id", sa.UUID(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.UUID(), nullable=False),
        sa.Column("author_role", _enum("forum_author_role"), nullable=False),
        sa.Column("author_name", sa.String(255), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["topic_id"], ["forum_topics.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_post_id"], ["forum_posts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_forum_posts_id"), "forum_posts", ["id"], unique=False)
    op.create_index(op.f("ix_forum_posts_author_id"), "forum_posts", ["author_id"], unique=False)
    op.create_index(op.f("ix_forum_posts_parent_post_id"), "forum_posts", ["parent_post_id"], unique=False)
    op.create_index("ix_forum_posts_topic_created", "forum_posts", ["topic_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("forum_posts")
    op.drop_table("forum_topics")
    op.drop_table("forum_categories")
    op.drop_table("messages")
    op.drop_table("conversation_participants")
    op.drop_table("conversations")
    op.drop_table("notification_recipients")
    op.drop_table("notifications")
    op.drop_constraint("fk_classes_supervisor_id", "classes", type_="foreignkey")
    op.drop_table("users")
    op.drop_table("classes")
    op.drop_table("grades")

    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
