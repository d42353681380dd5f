"""Tests for enrollment policies and the policy engine."""

import pytest

from shared.domain import (
    Course,
    DuplicateCourseEnrollmentError,
    DuplicateCoursePolicy,
    EnrollmentLimitExceededError,
    EnrollmentLimitPolicy,
    Grade,
    PolicyEngine,
    Student,
    create_default_enrollment_policy_engine,
)


@pytest.fixture
def full_student(math: Course, bio: Course) -> Student:
    return Student.restore(1, "Ann", "ann@x.com", [(math, Grade.A), (bio, Grade.B)])


class TestEnrollmentLimitPolicy:
    def test_allows_below_limit(self, student: Student, math: Course) -> None:
        result = EnrollmentLimitPolicy().evaluate(student, math)
        assert result.allowed
        assert result.metadata["current_enrollments"] == 0

    def test_denies_at_limit(self, full_student: Student, art: Course) -> None:
        result = EnrollmentLimitPolicy().evaluate(full_student, art)
        assert not result.allowed
        assert result.violated_rules == ["enrollment_limit"]
        assert result.metadata == {"max_enrollments": 2, "current_enrollments": 2}

    def test_transfer_is_never_limited(self, full_student: Student, art: Course) -> None:
        result = EnrollmentLimitPolicy().evaluate(full_student, art, replacing=2)
        assert result.allowed

    def test_custom_limit(self, math: Course, bio: Course) -> None:
        student = Student.restore(1, "Ann", "ann@x.com", [(math, Grade.A)])
        result = EnrollmentLimitPolicy(max_enrollments=1).evaluate(student, bio)
        assert not result.allowed

    def test_violation_type(self, full_student: Student, art: Course) -> None:
        policy = EnrollmentLimitPolicy()
        error = policy.violation(policy.evaluate(full_student, art))
        assert isinstance(error, EnrollmentLimitExceededError)
        assert error.context["violated_rules"] == ["enrollment_limit"]


class TestDuplicateCoursePolicy:
    def test_denies_held_course(self, full_student: Student) -> None:
        result = DuplicateCoursePolicy().evaluate(full_student, Course(name="Bio", credits=3))
        assert not result.allowed
        assert result.metadata == {"course": "Bio", "number": 2}

    def test_ignores_slot_being_replaced(self, full_student: Student, bio: Course) -> None:
        result = DuplicateCoursePolicy().evaluate(full_student, bio, replacing=2)
        assert result.allowed

    def test_allows_new_course(self, full_student: Student, art: Course) -> None:
        assert DuplicateCoursePolicy().evaluate(full_student, art).allowed

    def test_violation_type(self, full_student: Student, math: Course) -> None:
        policy = DuplicateCoursePolicy()
        error = policy.violation(policy.evaluate(full_student, math))
        assert isinstance(error, DuplicateCourseEnrollmentError)
        assert error.status_code == 400


class TestPolicyEngine:
    def test_default_engine_orders_by_priority(self) -> None:
        engine = create_default_enrollment_policy_engine()
        assert [p.name for p in engine.policies] == ["enrollment_limit", "duplicate_course"]

    def test_registration_sorts_higher_priority_first(self) -> None:
        engine = PolicyEngine()
        engine.register_policy(DuplicateCoursePolicy(priority=1))
        engine.register_policy(EnrollmentLimitPolicy(priority=50))
        assert [p.name for p in engine.policies] == ["enrollment_limit", "duplicate_course"]

    def test_enforce_raises_duplicate_when_slots_free(
        self, math: Course, bio: Course
    ) -> None:
        student = Student.restore(1, "Ann", "ann@x.com", [(math, Grade.A)])
        with pytest.raises(DuplicateCourseEnrollmentError):
            create_default_enrollment_policy_engine().enforce(student, math)
        create_default_enrollment_policy_engine().enforce(student, bio)

    def test_evaluate_all_stops_at_first_denial(
        self, full_student: Student, math: Course
    ) -> None:
        allowed, results = create_default_enrollment_policy_engine().evaluate_all(
            full_student, math
        )
        assert not allowed
        assert len(results) == 1
        assert results[0].violated_rules == ["enrollment_limit"]

    def test_evaluate_all_allows(self, student: Student, math: Course) -> None:
        allowed, results = create_default_enrollment_policy_engine().evaluate_all(
            student, math
        )
        assert allowed
        assert len(results) == 2

    def test_enforce_raises_limit_before_duplicate(
        self, full_student: Student, math: Course
    ) -> None:
        with pytest.raises(EnrollmentLimitExceededError):
            create_default_enrollment_policy_engine().enforce(full_student, math)

    def test_enforce_passes(self, student: Student, math: Course) -> None:
        create_default_enrollment_policy_engine().enforce(student, math)

    def test_student_uses_replacement_engine(
        self, student: Student, math: Course, bio: Course, art: Course
    ) -> None:
        engine = PolicyEngine()
        engine.register_policy(EnrollmentLimitPolicy(max_enrollments=1))
        student.use_policy_engine(engine)

        student.enroll(math, Grade.A)
        with pytest.raises(EnrollmentLimitExceededError):
            student.enroll(bio, Grade.B)

    def test_students_do_not_share_default_engine(self, math: Course, bio: Course) -> None:
        capped = Student(name="Ann", email="ann@x.com")
        other = Student(name="Bob", email="bob@x.com")
        assert capped.policy_engine is not other.policy_engine

        capped.policy_engine.register_policy(
            EnrollmentLimitPolicy(max_enrollments=1, priority=200)
        )
        capped.enroll(math, Grade.A)
        with pytest.raises(EnrollmentLimitExceededError):
            capped.enroll(bio, Grade.B)

        other.enroll(math, Grade.A)
        other.enroll(bio, Grade.B)
        assert other.enrollment_count == 2
