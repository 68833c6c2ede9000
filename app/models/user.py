"""User Model"""

from sqlalchemy import Column, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, StatusMixin, enum_column_type
from app.models.enums import UserRole


class User(BaseModel, StatusMixin):
    """
    Unified user model for all roles (Admin, Teacher, Student, Parent).
    Students carry their grade, class and parent links; these are what
    notification targeting and contact lookup read.
    """
    __tablename__ = "users"

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Personal Information
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)

    # Role & Permissions (RBAC)
    role = Column(enum_column_type(UserRole, "user_role"), nullable=False, index=True)

    # Student placement
    grade_id = Column(Integer, ForeignKey("grades.id", ondelete="SET NULL"), nullable=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    grade = relationship("Grade", back_populates="students")
    school_class = relationship("SchoolClass", back_populates="students", foreign_keys=[class_id])
    parent = relationship("User", remote_side="User.id", back_populates="children")
    children = relationship("User", back_populates="parent")
    supervised_classes = relationship(
        "SchoolClass",
        back_populates="supervisor",
        foreign_keys="SchoolClass.supervisor_id",
    )

    @property
    def full_name(self) -> str:
        """Get user's full name"""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_parent(self) -> bool:
        return self.role == UserRole.PARENT

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
