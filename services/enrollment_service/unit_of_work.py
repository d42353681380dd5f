"""
Unit of Work

Transaction boundary for one request: repositories share a session, and
every change they make becomes durable together on ``commit`` or not at all.
"""

from types import TracebackType

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from services.enrollment_service.repository import CourseRepository, StudentRepository
from shared.domain.exceptions import ConcurrencyConflictError
from shared.domain.policies import PolicyEngine

logger = structlog.get_logger(__name__)


class UnitOfWork:
    """
    Async context manager around a session.

    Leaving the scope without a commit, or with an exception, rolls back.
    """

    def __init__(self, session: AsyncSession, policy_engine: PolicyEngine | None = None):
        """
        Initialize unit of work.

        Args:
            session: Database session owned by the caller
            policy_engine: Policies attached to students loaded in this scope
        """
        self.session = session
        self.students = StudentRepository(session, policy_engine=policy_engine)
        self.courses = CourseRepository(session)
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None or not self._committed:
            await self.session.rollback()
            if exc_type is not None:
                logger.debug("Unit of work rolled back", error=str(exc))

    async def commit(self) -> None:
        """
        Make all pending changes durable.

        Raises:
            ConcurrencyConflictError: If a student changed since it was loaded
        """
        try:
            await self.session.commit()
        except StaleDataError as e:
            await self.session.rollback()
            raise ConcurrencyConflictError(cause=e) from e
        self._committed = True

    async def rollback(self) -> None:
        """Discard all pending changes."""
        await self.session.rollback()
