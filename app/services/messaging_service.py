"""Messaging Service - conversation threads and their last-message projection"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.academic import SchoolClass
from app.models.communication import Conversation, ConversationParticipant, Message
from app.models.enums import MESSAGING_ROLES, MessagePriority, UserRole
from app.models.user import User
from app.schemas.messaging import ConversationCreate
from app.services.user_service import UserService
from app.utils.time import get_utc_now, to_naive_utc

logger = logging.getLogger(__name__)


def _participant(conversation: Conversation, user_id: UUID) -> Optional[ConversationParticipant]:
    for participant in conversation.participants:
        if participant.user_id == user_id:
            return participant
    return None


class MessagingService:
    @staticmethod
    async def get_conversation(db: AsyncSession, conversation_id: UUID) -> Optional[Conversation]:
        # populate_existing: the projection columns are written with bulk UPDATEs
        result = await db.execute(
            select(Conversation)
            .options(selectinload(Conversation.participants))
            .where(Conversation.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_conversation(
        db: AsyncSession,
        sender: User,
        data: ConversationCreate,
    ) -> Tuple[Conversation, Message]:
        """Open a two-party thread and send its first message."""
        if sender.role not in MESSAGING_ROLES:
            raise ForbiddenError("Your role cannot start conversations")
        if data.receiver_id == sender.id:
            raise BadRequestError("Cannot start a conversation with yourself")

        receiver = await UserService.get_user_by_id(db, data.receiver_id)
        if (
            not receiver
            or not receiver.is_active
            or receiver.role != data.receiver_role
            or receiver.role not in MESSAGING_ROLES
        ):
            raise NotFoundError("Sender or receiver not found")

        joined_at = get_utc_now()
        conversation = Conversation(
            subject=data.subject,
            category=data.category,
            student_id=data.student_id,
            is_active=True,
            participants=[
                ConversationParticipant(
                    user_id=sender.id, role=sender.role, name=sender.full_name, joined_at=joined_at
                ),
                ConversationParticipant(
                    user_id=receiver.id, role=receiver.role, name=receiver.full_name, joined_at=joined_at
                ),
            ],
        )
        db.add(conversation)
        await db.flush()

        logger.info(
            "Conversation created",
            extra={"conversation_id": str(conversation.id), "category": data.category.value},
        )
        return await MessagingService.append_message(
            db,
            conversation.id,
            sender,
            data.content,
            receiver_id=receiver.id,
        )

    @staticmethod
    async def append_message(
        db: AsyncSession,
        conversation_id: UUID,
        sender: User,
        content: str,
        receiver_id: Optional[UUID] = None,
        receiver_role: Optional[UserRole] = None,
        priority: MessagePriority = MessagePriority.MEDIUM,
        attachments: Optional[List[Dict[str, Any]]] = None,
        sent_at: Optional[datetime] = None,
    ) -> Tuple[Conversation, Message]:
        """
        Persist a message, then overwrite the conversation's last-message
        projection with it.

        The overwrite only applies when the message is not older than the
        current projection, so concurrent appends converge on the newest
        message by timestamp. ``updated_at`` is bumped either way.
        """
        conversation = await MessagingService.get_conversation(db, conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        if _participant(conversation, sender.id) is None:
            raise ForbiddenError("Access denied")
        if not conversation.is_active:
            raise ForbiddenError("Conversation is closed")

        if receiver_id is not None:
            receiver = _participant(conversation, receiver_id)
            if receiver is None or receiver_id == sender.id:
                raise BadRequestError("Receiver is not a participant of this conversation")
            if receiver_role is not None and receiver.role != receiver_role:
                raise BadRequestError("Receiver role does not match")
        else:
            receiver = next((p for p in conversation.participants if p.user_id != sender.id), None)
            if receiver is None:
                raise BadRequestError("Conversation has no other participant")

        created_at = to_naive_utc(sent_at) or get_utc_now()
        message = Message(
            conversation_id=conversation.id,
            sender_id=sender.id,
            sender_role=sender.role,
            receiver_id=receiver.user_id,
            receiver_role=receiver.role,
            subject=conversation.subject,
            content=content,
            attachments=attachments or [],
            is_read=False,
            read_at=None,
            priority=priority,
            category=conversation.category,
            student_id=conversation.student_id,
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(message)
        await db.flush()

        now = get_utc_now()
        projected = await db.execute(
            update(Conversation)
            .where(
                Conversation.id == conversation.id,
                or_(
                    Conversation.last_message_at.is_(None),
                    Conversation.last_message_at <= created_at,
                ),
            )
            .values(
                last_message_content=content,
                last_message_sender_id=sender.id,
                last_message_sender_name=sender.full_name,
                last_message_at=created_at,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if not projected.rowcount:
            await db.execute(
                update(Conversation)
                .where(Conversation.id == conversation.id)
                .values(updated_at=now)
                .execution_options(synchronize_session=False)
            )
        await db.commit()

        return await MessagingService.get_conversation(db, conversation.id), message

    @staticmethod
    async def mark_message_read(db: AsyncSession, message_id: UUID, reader_id: UUID) -> bool:
        """
        Mark a message read by its receiver. Returns whether such a message
        exists for this reader; repeat calls keep the first ``read_at``.
        The conversation projection is not touched.
        """
        result = await db.execute(
            update(Message)
            .where(
                Message.id == message_id,
                Message.receiver_id == reader_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True, read_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            await db.commit()
            return True

        existing = await db.scalar(
            select(Message.id).where(Message.id == message_id, Message.receiver_id == reader_id)
        )
        return existing is not None

    @staticmethod
    async def list_conversations(
        db: AsyncSession,
        user: User,
        limit: int = 50,
    ) -> Tuple[List[Tuple[Conversation, int]], int]:
        """Active conversations of this user, most recently updated first, with unread counts."""
        result = await db.execute(
            select(Conversation)
            .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
            .options(selectinload(Conversation.participants))
            .where(
                ConversationParticipant.user_id == user.id,
                Conversation.is_active.is_(True),
            )
            .order_by(Conversation.updated_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        conversations = list(result.scalars().unique().all())
        if not conversations:
            return [], 0

        counts = await db.execute(
            select(Message.conversation_id, func.count())
            .where(
                Message.conversation_id.in_([c.id for c in conversations]),
                Message.receiver_id == user.id,
                Message.is_read.is_(False),
            )
            .group_by(Message.conversation_id)
        )
        unread = {conversation_id: count for conversation_id, count in counts.all()}

        rows = [(c, unread.get(c.id, 0)) for c in conversations]
        return rows, sum(count for _, count in rows)

    @staticmethod
    async def get_messages(
        db: AsyncSession,
        conversation_id: UUID,
        user: User,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[Conversation, List[Message], int]:
        """
        A page of messages, oldest first within the page (pages count back
        from the newest). Opening the thread marks every unread message
        addressed to the user as read; the returned page still shows the
        state it had when fetched.
        """
        conversation = await MessagingService.get_conversation(db, conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        if _participant(conversation, user.id) is None:
            raise ForbiddenError("Access denied")

        result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        messages = list(reversed(result.scalars().all()))

        total = await db.scalar(
            select(func.count()).select_from(Message).where(Message.conversation_id == conversation_id)
        )

        await db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.receiver_id == user.id,
                Message.is_read.is_(False),
            )
            .values(is_read=True, read_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        return conversation, messages, total or 0

    @staticmethod
    async def list_contacts(db: AsyncSession, user: User) -> List[Dict[str, Any]]:
        """
        People this user can start a conversation with.

        Parents see the class teachers of their children; teachers see the
        parents of students in classes they supervise. Other roles get none.
        """
        if user.role == UserRole.PARENT:
            child = aliased(User)
            result = await db.execute(
                select(User)
                .join(SchoolClass, SchoolClass.supervisor_id == User.id)
                .where(
                    SchoolClass.id.in_(
                        select(child.class_id).where(child.parent_id == user.id, child.class_id.is_not(None))
                    ),
                    User.is_active.is_(True),
                )
                .order_by(User.last_name, User.first_name)
            )
            teachers = result.scalars().unique().all()
            return [
                {
                    "id": t.id,
                    "name": t.full_name,
                    "role": t.role,
                    "email": t.email,
                    "phone": t.phone,
                    "children": [],
                }
                for t in teachers
            ]

        if user.role == UserRole.TEACHER:
            result = await db.execute(
                select(User)
                .options(selectinload(User.school_class), selectinload(User.grade))
                .join(SchoolClass, SchoolClass.id == User.class_id)
                .where(
                    SchoolClass.supervisor_id == user.id,
                    User.role == UserRole.STUDENT,
                    User.parent_id.is_not(None),
                )
                .order_by(User.last_name, User.first_name)
            )
            students = result.scalars().unique().all()
            parent_ids = list(dict.fromkeys(s.parent_id for s in students))
            if not parent_ids:
                return []

            parents = await db.execute(
                select(User)
                .where(User.id.in_(parent_ids), User.is_active.is_(True))
                .order_by(User.last_name, User.first_name)
            )
            return [
                {
                    "id": p.id,
                    "name": p.full_name,
                    "role": p.role,
                    "email": p.email,
                    "phone": p.phone,
                    "children": [
                        {
                            "id": s.id,
                            "name": s.full_name,
                            "class_name": s.school_class.name if s.school_class else None,
                            "grade": s.grade.display_name if s.grade else None,
                        }
                        for s in students
                        if s.parent_id == p.id
                    ],
                }
                for p in parents.scalars().all()
            ]

        return []
