"""
Student Service

Application layer for student enrollment. Each method is one request:
load the aggregate, resolve course and grade text, apply one domain
operation, save, commit.
"""

import structlog

from services.enrollment_service.unit_of_work import UnitOfWork
from shared.domain.academic import Course, Disenrollment, Enrollment, Grade
from shared.domain.exceptions import (
    CourseNotFoundError,
    InvalidGradeError,
    StudentNotFoundError,
    ValidationError,
)
from shared.domain.student import Student

logger = structlog.get_logger(__name__)


class StudentService:
    """
    Service orchestrating student registration and enrollment changes.

    The unit of work is injected by the request layer; the domain model is
    never handed a repository or session.
    """

    def __init__(self, uow: UnitOfWork):
        """
        Initialize student service.

        Args:
            uow: Unit of work scoping this request's transaction
        """
        self.uow = uow

    async def _get_student(self, student_id: int) -> Student:
        student = await self.uow.students.get_by_id(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    async def _resolve_course(self, course_name: str | None) -> Course:
        course = await self.uow.courses.get_by_name(course_name) if course_name else None
        if course is None:
            raise CourseNotFoundError(course_name)
        return course

    @staticmethod
    def _parse_grade(grade_text: str | None) -> Grade:
        grade = Grade.try_parse(grade_text)
        if grade is None:
            raise InvalidGradeError(grade_text)
        return grade

    async def list_students(
        self, enrolled: str | None = None, number: int | None = None
    ) -> list[Student]:
        """
        List students, optionally filtered.

        Args:
            enrolled: "yes", "no", or None
            number: Exact enrollment count, or None
        """
        async with self.uow:
            return await self.uow.students.get_list(enrolled, number)

    async def register(
        self,
        name: str,
        email: str,
        course1: str | None = None,
        course1_grade: str | None = None,
        course2: str | None = None,
        course2_grade: str | None = None,
    ) -> Student:
        """
        Register a student with up to two initial enrollments.

        Each course/grade pair is applied only when both are given; giving
        one without the other is rejected.

        Returns:
            Student: The saved student, with its id assigned
        """
        async with self.uow:
            student = Student(name=name, email=email)

            for course_name, grade_text in ((course1, course1_grade), (course2, course2_grade)):
                if course_name is None and grade_text is None:
                    continue
                if course_name is None or grade_text is None:
                    raise ValidationError(
                        "Course and grade must be given together",
                        field="course",
                        value=course_name,
                    )
                course = await self._resolve_course(course_name)
                student.enroll(course, self._parse_grade(grade_text))

            await self.uow.students.save(student)
            await self.uow.commit()

        logger.info("Student registered", student_id=student.id, enrollments=student.enrollment_count)
        return student

    async def unregister(self, student_id: int) -> None:
        """Delete a student and everything it owns."""
        async with self.uow:
            student = await self._get_student(student_id)
            await self.uow.students.delete(student)
            await self.uow.commit()

        logger.info("Student unregistered", student_id=student_id)

    async def enroll(self, student_id: int, course_name: str, grade_text: str) -> Enrollment:
        """
        Enroll a student in a course by name.

        Raises:
            StudentNotFoundError, CourseNotFoundError, InvalidGradeError,
            EnrollmentLimitExceededError, DuplicateCourseEnrollmentError
        """
        async with self.uow:
            student = await self._get_student(student_id)
            course = await self._resolve_course(course_name)
            grade = self._parse_grade(grade_text)

            enrollment = student.enroll(course, grade)

            await self.uow.students.save(student)
            await self.uow.commit()
        return enrollment

    async def transfer(
        self, student_id: int, number: int, course_name: str, grade_text: str
    ) -> Enrollment:
        """
        Move enrollment ``number`` to another course and grade.

        Raises:
            StudentNotFoundError, CourseNotFoundError, InvalidGradeError,
            EnrollmentNotFoundError, DuplicateCourseEnrollmentError
        """
        async with self.uow:
            student = await self._get_student(student_id)
            course = await self._resolve_course(course_name)
            grade = self._parse_grade(grade_text)

            enrollment = student.transfer(number, course, grade)

            await self.uow.students.save(student)
            await self.uow.commit()
        return enrollment

    async def disenroll(self, student_id: int, number: int, comment: str | None) -> Disenrollment:
        """
        Remove enrollment ``number`` with an audit comment.

        Raises:
            StudentNotFoundError, MissingAuditCommentError, EnrollmentNotFoundError
        """
        async with self.uow:
            student = await self._get_student(student_id)

            disenrollment = student.remove_enrollment(number, comment)

            await self.uow.students.save(student)
            await self.uow.commit()
        return disenrollment

    async def edit_personal_info(self, student_id: int, name: str, email: str) -> Student:
        """
        Replace a student's name and email.

        Raises:
            StudentNotFoundError, InvalidPersonalInfoError
        """
        async with self.uow:
            student = await self._get_student(student_id)

            student.edit_personal_info(name, email)

            await self.uow.students.save(student)
            await self.uow.commit()
        return student
