"""
Enrollment Service Database Models

SQLAlchemy models for students, courses, enrollment slots, and disenrollment
audit records.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CourseModel(Base):
    """Course catalog entry."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )


class StudentModel(Base):
    """
    Student database model.

    ``version`` drives optimistic concurrency: an update against a stale
    version fails at flush.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    enrollments: Mapped[list["EnrollmentModel"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="EnrollmentModel.number",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}


class EnrollmentModel(Base):
    """One occupied enrollment slot of a student."""

    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("student_id", "number", name="uq_enrollment_slot"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)  # slot 1 or 2
    grade: Mapped[str] = mapped_column(String(2), nullable=False)

    student: Mapped[StudentModel] = relationship(back_populates="enrollments")
    course: Mapped[CourseModel] = relationship(lazy="joined")


class DisenrollmentModel(Base):
    """
    Disenrollment audit record (append-only).

    Written whenever an enrollment is removed, with the mandatory comment.
    """

    __tablename__ = "disenrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    removed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    student: Mapped[StudentModel] = relationship()
    course: Mapped[CourseModel] = relationship(lazy="joined")
