"""
Student API Endpoints

Registration, enrollment, transfer, disenrollment, and personal info edits.
Domain errors are turned into JSON error responses by the application's
exception handler.
"""

import structlog
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from services.enrollment_service.student_service import StudentService
from services.enrollment_service.unit_of_work import UnitOfWork
from shared.database import get_db
from shared.domain.student import Student

logger = structlog.get_logger(__name__)

router = APIRouter()


# Request/Response Models
class StudentDto(BaseModel):
    """Student with both enrollment slots flattened."""

    id: int | None = None
    name: str
    email: str
    course1: str | None = None
    course1_grade: str | None = None
    course1_credits: int | None = None
    course2: str | None = None
    course2_grade: str | None = None
    course2_credits: int | None = None


class RegisterRequest(BaseModel):
    """Register student request."""

    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=200)
    course1: str | None = None
    course1_grade: str | None = None
    course2: str | None = None
    course2_grade: str | None = None


class EnrollRequest(BaseModel):
    """Enrollment request; course and grade arrive as text."""

    course: str
    grade: str


class TransferRequest(BaseModel):
    """Transfer request."""

    course: str
    grade: str


class DisenrollRequest(BaseModel):
    """Disenrollment request."""

    comment: str | None = None


class PersonalInfoRequest(BaseModel):
    """Edit personal info request."""

    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=200)


class RegisterResponse(BaseModel):
    """Register response."""

    id: int


class OperationResponse(BaseModel):
    """Generic success response."""

    status: str = "ok"


def to_dto(student: Student) -> StudentDto:
    """Flatten a student aggregate into its transport shape."""
    first = student.first_enrollment
    second = student.second_enrollment
    return StudentDto(
        id=student.id,
        name=student.name,
        email=student.email,
        course1=first.course.name if first else None,
        course1_grade=first.grade.to_text() if first else None,
        course1_credits=first.course.credits if first else None,
        course2=second.course.name if second else None,
        course2_grade=second.grade.to_text() if second else None,
        course2_credits=second.course.credits if second else None,
    )


async def get_student_service(db: AsyncSession = Depends(get_db)) -> StudentService:
    """
    Dependency to create StudentService.

    Args:
        db: Database session

    Returns:
        StudentService: Service bound to a unit of work for this request
    """
    return StudentService(UnitOfWork(db))


@router.get("", response_model=list[StudentDto])
async def list_students(
    enrolled: str | None = Query(None, description="'yes' or 'no'"),
    number: int | None = Query(None, ge=0, le=2, description="Exact enrollment count"),
    service: StudentService = Depends(get_student_service),
) -> list[StudentDto]:
    """
    List students with optional enrollment filters.

    Args:
        enrolled: Only students with ("yes") or without ("no") enrollments
        number: Only students with exactly this many enrollments
        service: Student service

    Returns:
        List of students
    """
    students = await service.list_students(enrolled, number)
    return [to_dto(student) for student in students]


@router.post("", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    service: StudentService = Depends(get_student_service),
) -> RegisterResponse:
    """Register a student, optionally with initial enrollments."""
    logger.info("Register API called", email=request.email)

    student = await service.register(
        name=request.name,
        email=request.email,
        course1=request.course1,
        course1_grade=request.course1_grade,
        course2=request.course2,
        course2_grade=request.course2_grade,
    )
    return RegisterResponse(id=student.id)


@router.delete("/{student_id}", response_model=OperationResponse)
async def unregister(
    student_id: int,
    service: StudentService = Depends(get_student_service),
) -> OperationResponse:
    """Delete a student."""
    await service.unregister(student_id)
    return OperationResponse()


@router.post("/{student_id}/enrollments", response_model=OperationResponse)
async def enroll(
    student_id: int,
    request: EnrollRequest,
    service: StudentService = Depends(get_student_service),
) -> OperationResponse:
    """Enroll a student in a course."""
    logger.info(
        "Enrollment API called",
        student_id=student_id,
        course=request.course,
    )

    await service.enroll(student_id, request.course, request.grade)
    return OperationResponse()


@router.post("/{student_id}/enrollments/{number}", response_model=OperationResponse)
async def transfer(
    student_id: int,
    number: int,
    request: TransferRequest,
    service: StudentService = Depends(get_student_service),
) -> OperationResponse:
    """Transfer enrollment ``number`` to another course and grade."""
    await service.transfer(student_id, number, request.course, request.grade)
    return OperationResponse()


@router.post("/{student_id}/enrollments/{number}/deletion", response_model=OperationResponse)
async def disenroll(
    student_id: int,
    number: int,
    request: DisenrollRequest,
    service: StudentService = Depends(get_student_service),
) -> OperationResponse:
    """Remove enrollment ``number``; a comment is required."""
    await service.disenroll(student_id, number, request.comment)
    return OperationResponse()


@router.put("/{student_id}", response_model=OperationResponse)
async def edit_personal_info(
    student_id: int,
    request: PersonalInfoRequest,
    service: StudentService = Depends(get_student_service),
) -> OperationResponse:
    """Replace a student's name and email."""
    await service.edit_personal_info(student_id, request.name, request.email)
    return OperationResponse()
