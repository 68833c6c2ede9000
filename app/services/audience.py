"""Audience resolution - turns a targeting rule into concrete notification recipients"""

from typing import Iterable, List, NamedTuple, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TargetAudience, UserRole
from app.models.user import User


class DirectoryEntry(NamedTuple):
    """The slice of a user that targeting needs"""
    user_id: UUID
    role: UserRole
    grade_id: Optional[int] = None
    class_id: Optional[int] = None


Recipient = Tuple[UUID, UserRole]

# Fan-out order for ALL: students first, then teachers, then parents
_BROADCAST_ROLES = (UserRole.STUDENT, UserRole.TEACHER, UserRole.PARENT)


def resolve_audience(
    audience: TargetAudience,
    directory: Iterable[DirectoryEntry],
    target_grade_id: Optional[int] = None,
    target_class_id: Optional[int] = None,
    exclude_user_id: Optional[UUID] = None,
) -> List[Recipient]:
    """
    Resolve a targeting rule against the user directory.

    Pure function: called once when a notification is created, never again.
    The result keeps directory order and contains each (user_id, role) pair
    at most once.

    Args:
        audience: Targeting rule
        directory: Users eligible to receive notifications
        target_grade_id: Grade for SPECIFIC_GRADE (also narrows STUDENTS)
        target_class_id: Class for SPECIFIC_CLASS
        exclude_user_id: Author, left out of ALL and TEACHERS broadcasts

    Returns:
        Ordered list of (user_id, role) recipients
    """
    entries = list(directory)

    def by_role(role: UserRole) -> List[DirectoryEntry]:
        return [e for e in entries if e.role == role]

    if audience == TargetAudience.ALL:
        selected = [
            e for role in _BROADCAST_ROLES for e in by_role(role)
            if e.user_id != exclude_user_id
        ]
    elif audience == TargetAudience.STUDENTS:
        selected = [
            e for e in by_role(UserRole.STUDENT)
            if target_grade_id is None or e.grade_id == target_grade_id
        ]
    elif audience == TargetAudience.TEACHERS:
        selected = [e for e in by_role(UserRole.TEACHER) if e.user_id != exclude_user_id]
    elif audience == TargetAudience.PARENTS:
        selected = by_role(UserRole.PARENT)
    elif audience == TargetAudience.SPECIFIC_GRADE:
        selected = [
            e for e in by_role(UserRole.STUDENT)
            if target_grade_id is not None and e.grade_id == target_grade_id
        ]
    elif audience == TargetAudience.SPECIFIC_CLASS:
        selected = [
            e for e in by_role(UserRole.STUDENT)
            if target_class_id is not None and e.class_id == target_class_id
        ]
    else:
        raise ValueError(f"Unsupported audience: {audience}")

    seen = set()
    recipients: List[Recipient] = []
    for entry in selected:
        key = (entry.user_id, entry.role)
        if key in seen:
            continue
        seen.add(key)
        recipients.append(key)
    return recipients


async def load_directory(db: AsyncSession) -> List[DirectoryEntry]:
    """Load every active student, teacher and parent in a stable order."""
    result = await db.execute(
        select(User.id, User.role, User.grade_id, User.class_id)
        .where(
            User.is_active.is_(True),
            User.role.in_(_BROADCAST_ROLES),
        )
        .order_by(User.created_at, User.id)
    )
    return [
        DirectoryEntry(user_id=row.id, role=row.role, grade_id=row.grade_id, class_id=row.class_id)
        for row in result.all()
    ]
