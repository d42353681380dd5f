"""
Rich Domain Exceptions

Exception hierarchy for the enrollment domain.
Supports structured error information, error codes, and context.
"""

from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for domain exceptions."""

    # Domain errors
    DOMAIN_VALIDATION_ERROR = "DOMAIN_VALIDATION_ERROR"
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    INVALID_GRADE = "INVALID_GRADE"
    MISSING_AUDIT_COMMENT = "MISSING_AUDIT_COMMENT"

    # Lookup errors
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    ENROLLMENT_NOT_FOUND = "ENROLLMENT_NOT_FOUND"

    # Enrollment errors
    ENROLLMENT_POLICY_VIOLATION = "ENROLLMENT_POLICY_VIOLATION"
    ENROLLMENT_LIMIT_EXCEEDED = "ENROLLMENT_LIMIT_EXCEEDED"
    DUPLICATE_COURSE_ENROLLMENT = "DUPLICATE_COURSE_ENROLLMENT"

    # System errors
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Provides structured error information with error codes, context, and metadata.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            error_code: Standard error code
            status_code: HTTP status code (default: 500)
            context: Additional context data
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        self.cause = cause

        logger.warning(
            "Domain exception raised",
            error_code=error_code.value,
            message=message,
            status_code=status_code,
            context=context,
            exception_type=type(self).__name__,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.error_code.value,
            "message": self.message,
            "type": type(self).__name__,
        }
        if self.context:
            result["context"] = self.context
        return result


class ValidationError(DomainException):
    """Raised when domain validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        error_code: ErrorCode = ErrorCode.DOMAIN_VALIDATION_ERROR,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            context=context,
            **kwargs
        )


class InvalidGradeError(ValidationError):
    """Raised when grade text does not name a known grade."""

    def __init__(self, value: str | None, **kwargs):
        super().__init__(
            message=f"Grade is incorrect: '{value}'",
            field="grade",
            value=value,
            error_code=ErrorCode.INVALID_GRADE,
            **kwargs
        )


class InvalidPersonalInfoError(ValidationError):
    """Raised when a student's name or email is empty."""


class MissingAuditCommentError(ValidationError):
    """Raised when an enrollment is removed without a justification."""

    def __init__(self, **kwargs):
        super().__init__(
            message="Disenrollment comment is required",
            field="comment",
            error_code=ErrorCode.MISSING_AUDIT_COMMENT,
            **kwargs
        )


class EntityNotFoundError(DomainException):
    """Raised when an entity is not found."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str | None = None,
        error_code: ErrorCode = ErrorCode.ENTITY_NOT_FOUND,
        **kwargs
    ):
        message = kwargs.pop("message", None)
        if message is None:
            message = f"{entity_type} not found"
            if entity_id:
                message += f" (ID: {entity_id})"

        context = kwargs.pop("context", {})
        context["entity_type"] = entity_type
        if entity_id:
            context["entity_id"] = entity_id

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=404,
            context=context,
            **kwargs
        )


class StudentNotFoundError(EntityNotFoundError):
    """Raised when a student id does not resolve."""

    def __init__(self, student_id: int, **kwargs):
        super().__init__(
            entity_type="Student",
            entity_id=str(student_id),
            error_code=ErrorCode.STUDENT_NOT_FOUND,
            message=f"No student found for Id {student_id}",
            **kwargs
        )
        self.student_id = student_id


class CourseNotFoundError(EntityNotFoundError):
    """Raised when a course name has no catalog entry."""

    def __init__(self, course_name: str | None, **kwargs):
        super().__init__(
            entity_type="Course",
            error_code=ErrorCode.COURSE_NOT_FOUND,
            message=f"Course is incorrect: '{course_name}'",
            context={"course_name": course_name},
            **kwargs
        )
        self.course_name = course_name


class EnrollmentNotFoundError(EntityNotFoundError):
    """Raised when a slot number references no current enrollment."""

    def __init__(self, number: int, **kwargs):
        super().__init__(
            entity_type="Enrollment",
            error_code=ErrorCode.ENROLLMENT_NOT_FOUND,
            message=f"No enrollment found with number '{number}'",
            context={"number": number},
            **kwargs
        )
        self.number = number


class EnrollmentPolicyViolationError(DomainException):
    """Raised when enrollment policies are violated."""

    def __init__(
        self,
        reason: str,
        violated_rules: list[str] | None = None,
        error_code: ErrorCode = ErrorCode.ENROLLMENT_POLICY_VIOLATION,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if violated_rules:
            context["violated_rules"] = violated_rules

        super().__init__(
            message=reason,
            error_code=error_code,
            status_code=400,
            context=context,
            **kwargs
        )
        self.reason = reason
        self.violated_rules = violated_rules or []


class EnrollmentLimitExceededError(EnrollmentPolicyViolationError):
    """Raised when a third concurrent enrollment is attempted."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            reason=reason,
            error_code=ErrorCode.ENROLLMENT_LIMIT_EXCEEDED,
            **kwargs
        )


class DuplicateCourseEnrollmentError(EnrollmentPolicyViolationError):
    """Raised when a student would hold the same course in both slots."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            reason=reason,
            error_code=ErrorCode.DUPLICATE_COURSE_ENROLLMENT,
            **kwargs
        )


class ConcurrencyConflictError(DomainException):
    """Raised when a concurrent request already changed the same student."""

    def __init__(
        self,
        message: str = "Student was modified by another request",
        **kwargs
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONCURRENCY_CONFLICT,
            status_code=409,
            **kwargs
        )
