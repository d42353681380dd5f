"""
Enrollment Service Repositories

Database access layer translating between the Student aggregate and its
SQLAlchemy rows. The domain model never sees a session.
"""

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from services.enrollment_service.models import (
    CourseModel,
    DisenrollmentModel,
    EnrollmentModel,
    StudentModel,
)
from shared.domain.academic import Course, Grade
from shared.domain.exceptions import (
    ConcurrencyConflictError,
    CourseNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from shared.domain.policies import PolicyEngine
from shared.domain.student import Student

logger = structlog.get_logger(__name__)


def _course_to_domain(row: CourseModel) -> Course:
    return Course(name=row.name, credits=row.credits)


class CourseRepository:
    """Read access to the course catalog."""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: Database session
        """
        self.session = session

    async def get_row(self, name: str) -> CourseModel | None:
        """Catalog row for an exact course name."""
        result = await self.session.execute(
            select(CourseModel).where(CourseModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Course | None:
        """
        Look up a course by exact, case-sensitive name.

        Args:
            name: Course name

        Returns:
            Course or None if the catalog has no such entry
        """
        row = await self.get_row(name)
        return _course_to_domain(row) if row is not None else None

    async def list_all(self) -> list[Course]:
        """All catalog courses ordered by name."""
        result = await self.session.execute(select(CourseModel).order_by(CourseModel.name))
        return [_course_to_domain(row) for row in result.scalars()]

    async def add(self, course: Course) -> Course:
        """
        Add a catalog entry. Used for seeding; the enrollment domain never
        creates courses.
        """
        self.session.add(CourseModel(name=course.name, credits=course.credits))
        await self.session.flush()
        logger.info("Course added", course=course.name, credits=course.credits)
        return course


class StudentRepository:
    """Persistence for the Student aggregate."""

    def __init__(self, session: AsyncSession, policy_engine: PolicyEngine | None = None):
        """
        Initialize repository.

        Args:
            session: Database session
            policy_engine: Policies attached to every loaded student
        """
        self.session = session
        self.courses = CourseRepository(session)
        self.policy_engine = policy_engine

    def _to_domain(self, row: StudentModel) -> Student:
        return Student.restore(
            student_id=row.id,
            name=row.name,
            email=row.email,
            enrollments=[
                (_course_to_domain(e.course), Grade.parse(e.grade)) for e in row.enrollments
            ],
            policy_engine=self.policy_engine,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def _course_row(self, name: str) -> CourseModel:
        row = await self.courses.get_row(name)
        if row is None:
            raise CourseNotFoundError(name)
        return row

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except StaleDataError as e:
            raise ConcurrencyConflictError(cause=e) from e

    async def get_by_id(self, student_id: int) -> Student | None:
        """
        Load a student with its enrollments.

        Returns:
            Student or None if no row has this id
        """
        row = await self.session.get(StudentModel, student_id)
        return self._to_domain(row) if row is not None else None

    async def get_list(
        self, enrolled: str | None = None, number: int | None = None
    ) -> list[Student]:
        """
        List students filtered by enrollment state.

        Args:
            enrolled: "yes" for students with any enrollment, "no" for none,
                None for either (case-insensitive)
            number: Exact enrollment count, or None

        Returns:
            Students ordered by id

        Raises:
            ValidationError: If enrolled is not yes/no
        """
        counts = (
            select(
                EnrollmentModel.student_id.label("student_id"),
                func.count(EnrollmentModel.id).label("enrollment_count"),
            )
            .group_by(EnrollmentModel.student_id)
            .subquery()
        )
        enrollment_count = func.coalesce(counts.c.enrollment_count, 0)

        query = (
            select(StudentModel)
            .outerjoin(counts, counts.c.student_id == StudentModel.id)
            .order_by(StudentModel.id)
        )

        if enrolled is not None:
            flag = enrolled.strip().lower()
            if flag == "yes":
                query = query.where(enrollment_count > 0)
            elif flag == "no":
                query = query.where(enrollment_count == 0)
            else:
                raise ValidationError(
                    "Enrolled filter must be 'yes' or 'no'", field="enrolled", value=enrolled
                )

        if number is not None:
            query = query.where(enrollment_count == number)

        result = await self.session.execute(query)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def save(self, student: Student) -> Student:
        """
        Insert or update a student, its enrollment slots, and pending
        disenrollment records. Assigns ``student.id`` on first save.

        Raises:
            StudentNotFoundError: If the student has an id with no row
            CourseNotFoundError: If an enrolled course left the catalog
            ConcurrencyConflictError: If the row changed since it was loaded
        """
        if student.id is None:
            row = StudentModel(
                name=student.name,
                email=student.email,
                created_at=student.created_at,
                updated_at=student.updated_at,
            )
            self.session.add(row)
        else:
            row = await self.session.get(StudentModel, student.id)
            if row is None:
                raise StudentNotFoundError(student.id)
            if row.version != student.version:
                raise ConcurrencyConflictError(
                    context={
                        "student_id": student.id,
                        "loaded_version": student.version,
                        "current_version": row.version,
                    }
                )
            row.name = student.name
            row.email = student.email
            row.updated_at = student.updated_at

        existing = {enrollment.number: enrollment for enrollment in row.enrollments}
        for enrollment in student.enrollments:
            course_row = await self._course_row(enrollment.course.name)
            slot = existing.pop(enrollment.number, None)
            if slot is None:
                row.enrollments.append(
                    EnrollmentModel(
                        number=enrollment.number,
                        grade=enrollment.grade.to_text(),
                        course=course_row,
                    )
                )
            else:
                slot.course = course_row
                slot.grade = enrollment.grade.to_text()
        for vacated in existing.values():
            row.enrollments.remove(vacated)

        for disenrollment in student.get_pending_disenrollments():
            self.session.add(
                DisenrollmentModel(
                    student=row,
                    course=await self._course_row(disenrollment.course.name),
                    number=disenrollment.number,
                    comment=disenrollment.comment,
                    removed_at=disenrollment.removed_at,
                )
            )

        await self._flush()

        student.id = row.id
        student.version = row.version
        student.mark_disenrollments_recorded()

        logger.debug(
            "Student saved",
            student_id=row.id,
            enrollments=len(student.enrollments),
        )
        return student

    async def delete(self, student: Student) -> None:
        """
        Delete a student with its enrollments and disenrollment records.

        Raises:
            StudentNotFoundError: If no row has the student's id
            ConcurrencyConflictError: If the row changed since it was loaded
        """
        row = await self.session.get(StudentModel, student.id) if student.id else None
        if row is None:
            raise StudentNotFoundError(student.id)
        if row.version != student.version:
            raise ConcurrencyConflictError(
                context={"student_id": student.id, "current_version": row.version}
            )

        await self.session.execute(
            delete(DisenrollmentModel).where(DisenrollmentModel.student_id == row.id)
        )
        await self.session.delete(row)
        await self._flush()

        logger.info("Student deleted", student_id=student.id)

    async def get_disenrollment_rows(self, student_id: int) -> list[DisenrollmentModel]:
        """Audit records of a student, oldest first."""
        result = await self.session.execute(
            select(DisenrollmentModel)
            .where(DisenrollmentModel.student_id == student_id)
            .order_by(DisenrollmentModel.id)
        )
        return list(result.scalars().all())
