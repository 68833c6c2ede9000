"""Centralized Enum Definitions"""

import enum


# Users & Authentication
class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


# Notifications
class NotificationType(str, enum.Enum):
    """Notification categories shown as badges in the inbox"""
    ANNOUNCEMENT = "ANNOUNCEMENT"
    ASSIGNMENT = "ASSIGNMENT"
    EXAM = "EXAM"
    ATTENDANCE = "ATTENDANCE"
    FEE = "FEE"
    GENERAL = "GENERAL"
    URGENT = "URGENT"


class NotificationPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TargetAudience(str, enum.Enum):
    """Targeting rule resolved into concrete recipients when a notification is created"""
    ALL = "ALL"
    STUDENTS = "STUDENTS"
    TEACHERS = "TEACHERS"
    PARENTS = "PARENTS"
    SPECIFIC_GRADE = "SPECIFIC_GRADE"
    SPECIFIC_CLASS = "SPECIFIC_CLASS"


# Messaging
class ConversationCategory(str, enum.Enum):
    GENERAL = "GENERAL"
    ACADEMIC = "ACADEMIC"
    DISCIPLINE = "DISCIPLINE"
    ATTENDANCE = "ATTENDANCE"
    FEES = "FEES"
    HEALTH = "HEALTH"
    TRANSPORT = "TRANSPORT"
    OTHER = "OTHER"


class MessagePriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Roles allowed to take part in conversations
MESSAGING_ROLES = (UserRole.PARENT, UserRole.TEACHER, UserRole.ADMIN)

# Roles allowed to author notifications
NOTIFICATION_AUTHOR_ROLES = (UserRole.ADMIN, UserRole.TEACHER)


# Forum
class ForumAuthorRole(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"


# Roles allowed to open topics and post replies
FORUM_AUTHOR_ROLES = (UserRole.STUDENT, UserRole.TEACHER)
