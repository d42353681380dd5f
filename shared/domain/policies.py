"""
Policy Engine & Enrollment Policies

Implements Strategy pattern for the rules a student's enrollments must obey:
the two-slot cap and the one-enrollment-per-course rule. Policies are
evaluated by the Student aggregate before it mutates anything.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from shared.domain.academic import Course
from shared.domain.exceptions import (
    DuplicateCourseEnrollmentError,
    EnrollmentLimitExceededError,
    EnrollmentPolicyViolationError,
)

if TYPE_CHECKING:
    from shared.domain.student import Student

logger = structlog.get_logger(__name__)

MAX_ENROLLMENTS = 2


class PolicyResult(BaseModel):
    """Result of policy evaluation."""

    model_config = ConfigDict(frozen=True)

    allowed: bool = Field(..., description="Whether action is allowed")
    reason: str = Field(..., description="Human-readable reason")
    violated_rules: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class EnrollmentPolicy(ABC):
    """
    Abstract base class for enrollment policies (Strategy pattern).

    Each concrete policy implements one enrollment rule and knows which
    domain error reports its violation.
    """

    def __init__(self, name: str, priority: int = 0):
        """
        Initialize policy.

        Args:
            name: Policy identifier
            priority: Execution priority (higher = earlier)
        """
        self.name = name
        self.priority = priority

    @abstractmethod
    def evaluate(
        self,
        student: "Student",
        course: Course,
        replacing: int | None = None,
    ) -> PolicyResult:
        """
        Evaluate whether the student may hold the course.

        Args:
            student: Student aggregate in its current state
            course: Course the student would hold
            replacing: Slot number being transferred, or None for a new enrollment

        Returns:
            PolicyResult: Evaluation result
        """

    @abstractmethod
    def violation(self, result: PolicyResult) -> EnrollmentPolicyViolationError:
        """Build the domain error describing a denied result."""

    def __lt__(self, other: "EnrollmentPolicy") -> bool:
        """Compare policies by priority for sorting."""
        return self.priority > other.priority  # Higher priority first


class EnrollmentLimitPolicy(EnrollmentPolicy):
    """
    Policy that caps concurrent enrollments.

    A transfer reuses its slot and is never limited.
    """

    def __init__(self, max_enrollments: int = MAX_ENROLLMENTS, priority: int = 100):
        super().__init__("enrollment_limit", priority)
        self.max_enrollments = max_enrollments

    def evaluate(
        self, student: "Student", course: Course, replacing: int | None = None
    ) -> PolicyResult:
        current = student.enrollment_count

        if replacing is None and current >= self.max_enrollments:
            return PolicyResult(
                allowed=False,
                reason=f"Cannot have more than {self.max_enrollments} enrollments",
                violated_rules=["enrollment_limit"],
                metadata={
                    "max_enrollments": self.max_enrollments,
                    "current_enrollments": current,
                },
            )

        return PolicyResult(
            allowed=True,
            reason=f"Enrollment slots available ({current}/{self.max_enrollments})",
            metadata={"current_enrollments": current},
        )

    def violation(self, result: PolicyResult) -> EnrollmentPolicyViolationError:
        return EnrollmentLimitExceededError(
            result.reason,
            violated_rules=result.violated_rules,
        )


class DuplicateCoursePolicy(EnrollmentPolicy):
    """Policy that keeps a course from occupying both slots."""

    def __init__(self, priority: int = 90):
        super().__init__("duplicate_course", priority)

    def evaluate(
        self, student: "Student", course: Course, replacing: int | None = None
    ) -> PolicyResult:
        for enrollment in student.enrollments:
            if enrollment.number == replacing:
                continue
            if enrollment.course.name == course.name:
                return PolicyResult(
                    allowed=False,
                    reason=f"Student is already enrolled in '{course.name}'",
                    violated_rules=["duplicate_course"],
                    metadata={"course": course.name, "number": enrollment.number},
                )

        return PolicyResult(allowed=True, reason="Course not yet held")

    def violation(self, result: PolicyResult) -> EnrollmentPolicyViolationError:
        return DuplicateCourseEnrollmentError(
            result.reason,
            violated_rules=result.violated_rules,
            context=dict(result.metadata),
        )


class PolicyEngine:
    """
    Policy evaluation engine that coordinates multiple policies.

    Executes policies in priority order and stops at the first denial.
    """

    def __init__(self):
        """Initialize policy engine."""
        self.policies: list[EnrollmentPolicy] = []

    def register_policy(self, policy: EnrollmentPolicy) -> None:
        """
        Register a policy with the engine.

        Args:
            policy: Policy to register
        """
        self.policies.append(policy)
        self.policies.sort()  # Sort by priority
        logger.debug("Policy registered", policy_name=policy.name, priority=policy.priority)

    def evaluate_all(
        self, student: "Student", course: Course, replacing: int | None = None
    ) -> tuple[bool, list[PolicyResult]]:
        """
        Evaluate registered policies until one denies.

        Returns:
            Tuple of (all_allowed, list of results). When denied, the last
            result belongs to the denying policy.
        """
        results: list[PolicyResult] = []

        for policy in self.policies:
            result = policy.evaluate(student, course, replacing)
            results.append(result)

            if not result.allowed:
                logger.info(
                    "Enrollment denied by policy",
                    policy=policy.name,
                    student_id=student.id,
                    course=course.name,
                    reason=result.reason,
                )
                return False, results

        return True, results

    def enforce(
        self, student: "Student", course: Course, replacing: int | None = None
    ) -> None:
        """
        Evaluate policies and raise the first violation.

        Raises:
            EnrollmentPolicyViolationError: Subclass named by the denying policy
        """
        allowed, results = self.evaluate_all(student, course, replacing)
        if not allowed:
            denying_policy = self.policies[len(results) - 1]
            raise denying_policy.violation(results[-1])


def create_default_enrollment_policy_engine() -> PolicyEngine:
    """
    Create policy engine with default enrollment policies.

    Returns:
        PolicyEngine: Configured engine with standard policies
    """
    engine = PolicyEngine()

    engine.register_policy(EnrollmentLimitPolicy(priority=100))
    engine.register_policy(DuplicateCoursePolicy(priority=90))

    return engine
