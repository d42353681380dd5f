"""Tests for the domain exception hierarchy."""

from shared.domain import (
    ConcurrencyConflictError,
    CourseNotFoundError,
    DomainException,
    EnrollmentLimitExceededError,
    EnrollmentNotFoundError,
    EnrollmentPolicyViolationError,
    EntityNotFoundError,
    ErrorCode,
    InvalidGradeError,
    MissingAuditCommentError,
    StudentNotFoundError,
    ValidationError,
)


class TestDomainException:
    def test_to_dict(self) -> None:
        error = ValidationError("Name is required", field="name")
        assert error.to_dict() == {
            "error": "DOMAIN_VALIDATION_ERROR",
            "message": "Name is required",
            "type": "ValidationError",
            "context": {"field": "name"},
        }

    def test_to_dict_omits_empty_context(self) -> None:
        error = ConcurrencyConflictError()
        assert "context" not in error.to_dict()
        assert error.status_code == 409
        assert error.error_code == ErrorCode.CONCURRENCY_CONFLICT


class TestMessages:
    def test_student_not_found(self) -> None:
        error = StudentNotFoundError(5)
        assert str(error) == "No student found for Id 5"
        assert error.status_code == 404
        assert error.context == {"entity_type": "Student", "entity_id": "5"}
        assert isinstance(error, EntityNotFoundError)

    def test_course_not_found(self) -> None:
        error = CourseNotFoundError("Chem")
        assert error.message == "Course is incorrect: 'Chem'"
        assert error.error_code == ErrorCode.COURSE_NOT_FOUND

    def test_enrollment_not_found(self) -> None:
        error = EnrollmentNotFoundError(2)
        assert error.message == "No enrollment found with number '2'"
        assert error.context["number"] == 2

    def test_invalid_grade(self) -> None:
        error = InvalidGradeError("Q")
        assert error.message == "Grade is incorrect: 'Q'"
        assert error.status_code == 400
        assert isinstance(error, ValidationError)

    def test_missing_audit_comment(self) -> None:
        error = MissingAuditCommentError()
        assert error.message == "Disenrollment comment is required"
        assert error.context == {"field": "comment"}

    def test_generic_not_found_message(self) -> None:
        assert EntityNotFoundError("Course", "7").message == "Course not found (ID: 7)"

    def test_policy_violation_hierarchy(self) -> None:
        error = EnrollmentLimitExceededError("full", violated_rules=["enrollment_limit"])
        assert isinstance(error, EnrollmentPolicyViolationError)
        assert isinstance(error, DomainException)
        assert error.reason == "full"
        assert error.status_code == 400
