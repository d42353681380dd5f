"""
Academic Domain Models

Grades, courses, and the enrollments that tie a student to a course.
Course and Disenrollment are immutable; Enrollment changes only through
``update`` (a transfer) and is created only by the Student aggregate.
"""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from shared.domain.entities import AbstractEntity, utcnow
from shared.domain.exceptions import InvalidGradeError, ValidationError


class Grade(str, Enum):
    """Letter grade recorded with an enrollment."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @classmethod
    def parse(cls, text: str) -> "Grade":
        """
        Parse grade text, case-sensitively.

        Raises:
            InvalidGradeError: If text is not exactly one of the grade literals
        """
        grade = cls.try_parse(text)
        if grade is None:
            raise InvalidGradeError(text)
        return grade

    @classmethod
    def try_parse(cls, text: str | None) -> "Grade | None":
        """Parse grade text, returning None instead of raising."""
        if not isinstance(text, str):
            return None
        try:
            return cls(text)
        except ValueError:
            return None

    def to_text(self) -> str:
        """Symbolic name of the grade; inverse of ``parse``."""
        return self.value


class Course(BaseModel):
    """
    Course reference entity, identified by its name.

    Owned by the course catalog; the enrollment domain only reads it.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=200)
    credits: int = Field(..., ge=1, description="Credit hours")


def find_course_by_name(catalog: Iterable[Course], name: str) -> Course | None:
    """
    Look up a course by exact, case-sensitive name.

    Args:
        catalog: Courses to search
        name: Course name

    Returns:
        The matching course, or None
    """
    return next((course for course in catalog if course.name == name), None)


class Enrollment(AbstractEntity):
    """
    A student's participation in one course, held in slot 1 or 2.

    The slot number is fixed for the lifetime of the object.
    """

    course: Course = Field(..., description="Enrolled course")
    grade: Grade = Field(..., description="Assigned grade")
    number: int = Field(..., ge=1, le=2, frozen=True, description="Slot number")

    def validate_business_rules(self) -> bool:
        """Enrollment always carries a course and a grade."""
        if self.course is None or not isinstance(self.grade, Grade):
            raise ValidationError("Enrollment requires a course and a grade")
        return True

    def update(self, course: Course, grade: Grade) -> None:
        """
        Replace course and grade in place (a transfer).

        Both arguments are checked before either field is written.

        Args:
            course: Resolved course to move to
            grade: New grade

        Raises:
            ValidationError: If course is missing
            InvalidGradeError: If grade is not a Grade
        """
        if course is None:
            raise ValidationError("Course is required", field="course")
        if not isinstance(grade, Grade):
            raise InvalidGradeError(grade)

        self.course = course
        self.grade = grade
        self.mark_updated()

    def renumbered(self, number: int) -> "Enrollment":
        """Copy of this enrollment placed in another slot."""
        return self.model_copy(update={"number": number})


class Disenrollment(BaseModel):
    """
    Audit record of a removed enrollment.

    Produced by Student.remove_enrollment and persisted alongside the student.
    """

    model_config = ConfigDict(frozen=True)

    course: Course
    number: int = Field(..., ge=1, le=2, description="Slot the enrollment occupied")
    comment: str = Field(..., min_length=1)
    removed_at: datetime = Field(default_factory=utcnow)
