"""Grade and class placement (read by notification targeting and contact lookup)"""

from sqlalchemy import Column, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.database import Base


class Grade(Base):
    """Class level, e.g. "Class 9"."""
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True)
    level = Column(Integer, unique=True, nullable=False)
    name = Column(String(100), nullable=True)

    classes = relationship("SchoolClass", back_populates="grade")
    students = relationship("User", back_populates="grade")

    @property
    def display_name(self) -> str:
        return self.name or f"Class {self.level}"

    def __repr__(self) -> str:
        return f"<Grade {self.level}>"


class SchoolClass(Base):
    """
    A section of a grade (e.g. "IX-A") with an optional class teacher.
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False)
    grade_id = Column(Integer, ForeignKey("grades.id", ondelete="CASCADE"), nullable=False, index=True)
    supervisor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_classes_supervisor_id"),
        nullable=True,
        index=True,
    )

    grade = relationship("Grade", back_populates="classes")
    supervisor = relationship("User", back_populates="supervised_classes", foreign_keys=[supervisor_id])
    students = relationship("User", back_populates="school_class", foreign_keys="User.class_id")

    def __repr__(self) -> str:
        return f"<SchoolClass {self.name}>"
