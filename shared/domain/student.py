"""
Student Aggregate

The Student aggregate root owns up to two enrollments and is the only way
to create, transfer, or remove them. Slots are always filled from 1 upward;
removing slot 1 moves the second enrollment into slot 1.
"""

from collections.abc import Iterable
from typing import Any

import structlog
from pydantic import Field, PrivateAttr, field_validator

from shared.domain.academic import Course, Disenrollment, Enrollment, Grade
from shared.domain.entities import AbstractEntity
from shared.domain.exceptions import (
    EnrollmentNotFoundError,
    InvalidGradeError,
    InvalidPersonalInfoError,
    MissingAuditCommentError,
    ValidationError,
)
from shared.domain.policies import (
    MAX_ENROLLMENTS,
    PolicyEngine,
    create_default_enrollment_policy_engine,
)

logger = structlog.get_logger(__name__)

PERSONAL_INFO_MAX_LENGTH = 200


def _require_text(value: str | None, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidPersonalInfoError(
            f"Student {field} must not be empty", field=field, value=value
        )
    if len(value) > PERSONAL_INFO_MAX_LENGTH:
        raise InvalidPersonalInfoError(
            f"Student {field} must be at most {PERSONAL_INFO_MAX_LENGTH} characters",
            field=field,
        )
    return value


class Student(AbstractEntity):
    """
    Student aggregate root.

    The id is assigned by persistence and stays None until the first save.
    ``version`` is the row version the student was loaded at; saving after
    another writer moved the row on is a concurrency conflict.
    """

    id: int | None = Field(default=None, description="Persistence-assigned id")
    name: str
    email: str
    version: int | None = Field(
        default=None, description="Row version the student was loaded at"
    )

    _enrollments: list[Enrollment] = PrivateAttr(default_factory=list)
    _pending_disenrollments: list[Disenrollment] = PrivateAttr(default_factory=list)
    _policy_engine: PolicyEngine = PrivateAttr(
        default_factory=create_default_enrollment_policy_engine
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _require_text(v, "email")

    @classmethod
    def restore(
        cls,
        student_id: int,
        name: str,
        email: str,
        enrollments: Iterable[tuple[Course, Grade]],
        policy_engine: PolicyEngine | None = None,
        **attributes: Any,
    ) -> "Student":
        """
        Rebuild a persisted student.

        Args:
            student_id: Persisted id
            name: Student name
            email: Student email
            enrollments: (course, grade) pairs in slot order
            policy_engine: Optional engine replacing the default policies
            **attributes: Extra fields such as persisted timestamps

        Returns:
            Student: Aggregate with its enrollments in place
        """
        pairs = list(enrollments)
        if len(pairs) > MAX_ENROLLMENTS:
            raise ValidationError(
                f"Student holds more than {MAX_ENROLLMENTS} enrollments",
                field="enrollments",
                value=len(pairs),
            )

        student = cls(id=student_id, name=name, email=email, **attributes)
        if policy_engine is not None:
            student._policy_engine = policy_engine
        student._enrollments = [
            Enrollment(course=course, grade=grade, number=number)
            for number, (course, grade) in enumerate(pairs, start=1)
        ]
        student.validate_business_rules()
        return student

    @property
    def policy_engine(self) -> PolicyEngine:
        """Policies evaluated on enroll and transfer."""
        return self._policy_engine

    def use_policy_engine(self, policy_engine: PolicyEngine) -> None:
        """Replace the policies evaluated on enroll and transfer."""
        self._policy_engine = policy_engine

    def validate_business_rules(self) -> bool:
        """Validate slot layout: at most two enrollments, numbered 1..n."""
        if len(self._enrollments) > MAX_ENROLLMENTS:
            raise ValidationError(
                f"Student holds more than {MAX_ENROLLMENTS} enrollments",
                field="enrollments",
            )
        for expected, enrollment in enumerate(self._enrollments, start=1):
            if enrollment.number != expected:
                raise ValidationError(
                    "Enrollment slots must be filled from 1 without gaps",
                    field="enrollments",
                    value=enrollment.number,
                )
        return True

    @property
    def enrollments(self) -> tuple[Enrollment, ...]:
        """Current enrollments in slot order."""
        return tuple(self._enrollments)

    @property
    def enrollment_count(self) -> int:
        return len(self._enrollments)

    @property
    def is_enrolled(self) -> bool:
        return bool(self._enrollments)

    @property
    def first_enrollment(self) -> Enrollment | None:
        return self.get_enrollment(1)

    @property
    def second_enrollment(self) -> Enrollment | None:
        return self.get_enrollment(2)

    @property
    def total_credits(self) -> int:
        return sum(enrollment.course.credits for enrollment in self._enrollments)

    def get_enrollment(self, number: int) -> Enrollment | None:
        """
        Look up the enrollment in a slot.

        Returns None for an empty slot and for any number outside 1..2.
        """
        if 1 <= number <= len(self._enrollments):
            return self._enrollments[number - 1]
        return None

    def enroll(self, course: Course, grade: Grade) -> Enrollment:
        """
        Enroll the student in the lowest free slot.

        Args:
            course: Resolved course
            grade: Parsed grade

        Returns:
            Enrollment: The new enrollment

        Raises:
            InvalidGradeError: If grade is not a Grade
            EnrollmentLimitExceededError: If both slots are occupied
            DuplicateCourseEnrollmentError: If the course is already held
        """
        if course is None:
            raise ValidationError("Course is required", field="course")
        if not isinstance(grade, Grade):
            raise InvalidGradeError(grade)

        self._policy_engine.enforce(self, course)

        enrollment = Enrollment(
            course=course, grade=grade, number=len(self._enrollments) + 1
        )
        self._enrollments.append(enrollment)
        self.mark_updated()

        logger.info(
            "Student enrolled",
            student_id=self.id,
            course=course.name,
            grade=grade.to_text(),
            number=enrollment.number,
        )
        return enrollment

    def transfer(self, number: int, course: Course, grade: Grade) -> Enrollment:
        """
        Move an existing enrollment to another course and grade.

        The update is applied even if course and grade are unchanged.

        Raises:
            EnrollmentNotFoundError: If the slot is empty
            DuplicateCourseEnrollmentError: If the other slot holds the course
        """
        enrollment = self.get_enrollment(number)
        if enrollment is None:
            raise EnrollmentNotFoundError(number)
        if course is None:
            raise ValidationError("Course is required", field="course")
        if not isinstance(grade, Grade):
            raise InvalidGradeError(grade)

        self._policy_engine.enforce(self, course, replacing=number)

        enrollment.update(course, grade)
        self.mark_updated()

        logger.info(
            "Enrollment transferred",
            student_id=self.id,
            number=number,
            course=course.name,
            grade=grade.to_text(),
        )
        return enrollment

    def remove_enrollment(self, number: int, comment: str | None) -> Disenrollment:
        """
        Remove an enrollment, recording why.

        A remaining second enrollment moves into slot 1.

        Args:
            number: Slot to vacate
            comment: Mandatory justification

        Returns:
            Disenrollment: Audit record, also queued for persistence

        Raises:
            MissingAuditCommentError: If comment is empty or blank
            EnrollmentNotFoundError: If the slot is empty
        """
        if comment is None or not comment.strip():
            raise MissingAuditCommentError()

        enrollment = self.get_enrollment(number)
        if enrollment is None:
            raise EnrollmentNotFoundError(number)

        self._enrollments.pop(number - 1)
        self._enrollments = [
            e if e.number == slot else e.renumbered(slot)
            for slot, e in enumerate(self._enrollments, start=1)
        ]

        disenrollment = Disenrollment(
            course=enrollment.course, number=number, comment=comment
        )
        self._pending_disenrollments.append(disenrollment)
        self.mark_updated()

        logger.info(
            "Enrollment removed",
            student_id=self.id,
            number=number,
            course=enrollment.course.name,
            remaining=len(self._enrollments),
        )
        return disenrollment

    def edit_personal_info(self, name: str, email: str) -> None:
        """
        Replace name and email.

        Raises:
            InvalidPersonalInfoError: If either value is empty
        """
        _require_text(name, "name")
        _require_text(email, "email")

        self.name = name
        self.email = email
        self.mark_updated()

    def get_pending_disenrollments(self) -> list[Disenrollment]:
        """Audit records not yet persisted."""
        return self._pending_disenrollments.copy()

    def mark_disenrollments_recorded(self) -> None:
        """Called after pending audit records are persisted."""
        self._pending_disenrollments.clear()
