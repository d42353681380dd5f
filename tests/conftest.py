"""Shared pytest fixtures for the enrollment service tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import services.enrollment_service.models  # noqa: F401  (registers tables)
from services.enrollment_service.repository import CourseRepository
from shared.config import Settings
from shared.database import Base, build_engine, build_session_factory
from shared.domain import Course, Student


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def math() -> Course:
    return Course(name="Math", credits=4)


@pytest.fixture
def bio() -> Course:
    return Course(name="Bio", credits=3)


@pytest.fixture
def art() -> Course:
    return Course(name="Art", credits=2)


@pytest.fixture
def student() -> Student:
    """A new, unsaved student with no enrollments."""
    return Student(name="Ann", email="ann@x.com")


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'enrollment.db'}",
    )


@pytest_asyncio.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite engine with all tables created."""
    eng = build_engine(test_settings)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def catalog(
    session_factory: async_sessionmaker[AsyncSession], math: Course, bio: Course, art: Course
) -> list[Course]:
    """Seed the course catalog with Math, Bio and Art."""
    courses = [math, bio, art]
    async with session_factory() as session:
        repo = CourseRepository(session)
        for course in courses:
            await repo.add(course)
        await session.commit()
    return courses


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s
