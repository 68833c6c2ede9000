"""Forum Models"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, StatusMixin, enum_column_type
from app.models.enums import ForumAuthorRole


class ForumCategory(BaseModel, StatusMixin):
    __tablename__ = "forum_categories"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), default="#3B82F6", nullable=False)
    allow_student_posts = Column(Boolean, default=True, nullable=False)

    topics = relationship("ForumTopic", back_populates="category")

    def __repr__(self) -> str:
        return f"<ForumCategory {self.name}>"


class ForumTopic(BaseModel):
    """
    Discussion topic.

    ``views`` is incremented in place on every fetch. ``replies`` and the
    ``last_reply_*`` columns are a projection of the newest post, written in
    the same statement that counts the post.
    """
    __tablename__ = "forum_topics"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("forum_categories.id", ondelete="CASCADE"), nullable=False)

    author_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    author_role = Column(enum_column_type(ForumAuthorRole, "forum_author_role"), nullable=False)
    author_name = Column(String(255), nullable=False)

    tags = Column(JSON, nullable=False, default=list)
    is_sticky = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    is_approved = Column(Boolean, default=True, nullable=False)

    views = Column(Integer, default=0, nullable=False)
    replies = Column(Integer, default=0, nullable=False)
    last_reply_at = Column(DateTime, nullable=True)
    last_reply_by = Column(Uuid(as_uuid=True), nullable=True)
    last_reply_by_name = Column(String(255), nullable=True)

    category = relationship("ForumCategory", back_populates="topics")
    posts = relationship("ForumPost", back_populates="topic", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_forum_topics_category_created", "category_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ForumTopic {self.title!r}>"


class ForumPost(BaseModel):
    """A reply in a topic; ``parent_post_id`` nests it under another post."""
    __tablename__ = "forum_posts"

    topic_id = Column(Uuid(as_uuid=True), ForeignKey("forum_topics.id", ondelete="CASCADE"), nullable=False)
    parent_post_id = Column(
        Uuid(as_uuid=True), ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=True, index=True
    )
    content = Column(Text, nullable=False)

    author_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    author_role = Column(enum_column_type(ForumAuthorRole, "forum_author_role"), nullable=False)
    author_name = Column(String(255), nullable=False)

    is_approved = Column(Boolean, default=True, nullable=False)

    topic = relationship("ForumTopic", back_populates="posts")

    __table_args__ = (
        Index("ix_forum_posts_topic_created", "topic_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ForumPost {self.id}>"
