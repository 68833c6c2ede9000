"""User Service - Business Logic Layer"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.models.user import User
from app.models.enums import UserRole
from app.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.STUDENT,
        grade_id: Optional[int] = None,
        class_id: Optional[int] = None,
        parent_id: Optional[UUID] = None,
        phone: Optional[str] = None,
        is_active: bool = True,
        auto_commit: bool = True,
    ) -> User:
        """
        Create a new user.
        When auto_commit=False, uses flush instead of commit (for batch seeding).
        """
        db_user = User(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            grade_id=grade_id,
            class_id=class_id,
            parent_id=parent_id,
            phone=phone,
            is_active=is_active,
        )
        db.add(db_user)
        if auto_commit:
            await db.commit()
            await db.refresh(db_user)
        else:
            await db.flush()

        logger.info("User created", extra={"user_id": str(db_user.id), "role": role.value})
        return db_user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        """
        Get user by ID.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            User or None if not found
        """
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User if authenticated and active, None otherwise
        """
        user = await UserService.get_user_by_email(db, email)

        if not user:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        if not user.is_active:
            return None

        return user
