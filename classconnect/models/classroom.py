"""Classes, enrollments and topics."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from classconnect.db import Base
from classconnect.models._common import new_id, utcnow


class Classroom(Base):
    """A course section owned by exactly one teacher."""

    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    class_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False, index=True)
    career_id: Mapped[str] = mapped_column(ForeignKey("careers.id"), nullable=False)
    semester: Mapped[str] = mapped_column(String(50), nullable=False)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    career = relationship("Career")
    teacher = relationship("User", foreign_keys=[teacher_id])
    enrollments: Mapped[List["Enrollment"]] = relationship(
        back_populates="classroom", cascade="all, delete-orphan"
    )
    topics: Mapped[List["Topic"]] = relationship(
        back_populates="classroom", cascade="all, delete-orphan", order_by="Topic.order_index"
    )

    def __repr__(self) -> str:
        return f"<Classroom(id={self.id}, code={self.class_code})>"


class Enrollment(Base):
    """Membership link between a student and a class."""

    __tablename__ = "class_enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    classroom = relationship("Classroom", back_populates="enrollments")
    student = relationship("User", foreign_keys=[student_id])


class Topic(Base):
    """Grouping of materials and assignments inside a class."""

    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, default="")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    classroom = relationship("Classroom", back_populates="topics")
