"""
Enrollment Domain Models

Core domain entities and value objects following Domain-Driven Design principles.

Composition Relationships:
- Student owns up to two Enrollments (aggregate root)
- Enrollment references a Course (non-owning)
- Student produces Disenrollment audit records on removal
- PolicyEngine holds the EnrollmentPolicy rules Student enforces
"""

from shared.domain.academic import (
    Course,
    Disenrollment,
    Enrollment,
    Grade,
    find_course_by_name,
)
from shared.domain.entities import AbstractEntity
from shared.domain.exceptions import (
    ConcurrencyConflictError,
    CourseNotFoundError,
    DomainException,
    DuplicateCourseEnrollmentError,
    EnrollmentLimitExceededError,
    EnrollmentNotFoundError,
    EnrollmentPolicyViolationError,
    EntityNotFoundError,
    ErrorCode,
    InvalidGradeError,
    InvalidPersonalInfoError,
    MissingAuditCommentError,
    StudentNotFoundError,
    ValidationError,
)
from shared.domain.policies import (
    MAX_ENROLLMENTS,
    DuplicateCoursePolicy,
    EnrollmentLimitPolicy,
    EnrollmentPolicy,
    PolicyEngine,
    PolicyResult,
    create_default_enrollment_policy_engine,
)
from shared.domain.student import Student

__all__ = [
    # Base Entities
    "AbstractEntity",
    # Academic
    "Grade",
    "Course",
    "Enrollment",
    "Disenrollment",
    "find_course_by_name",
    # Aggregate
    "Student",
    # Policies
    "MAX_ENROLLMENTS",
    "EnrollmentPolicy",
    "EnrollmentLimitPolicy",
    "DuplicateCoursePolicy",
    "PolicyEngine",
    "PolicyResult",
    "create_default_enrollment_policy_engine",
    # Errors
    "ErrorCode",
    "DomainException",
    "ValidationError",
    "InvalidGradeError",
    "InvalidPersonalInfoError",
    "MissingAuditCommentError",
    "EntityNotFoundError",
    "StudentNotFoundError",
    "CourseNotFoundError",
    "EnrollmentNotFoundError",
    "EnrollmentPolicyViolationError",
    "EnrollmentLimitExceededError",
    "DuplicateCourseEnrollmentError",
    "ConcurrencyConflictError",
]
