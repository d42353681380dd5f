"""Enrollment Service Main Application"""
import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from services.enrollment_service.api import students
from shared.config import settings
from shared.database import close_db, init_db
from shared.domain.exceptions import DomainException
from shared.logging import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting Enrollment Service", environment=settings.environment)

    # Retry database connection with backoff
    for attempt in range(5):
        try:
            await init_db()
            logger.info("Enrollment Service ready - database connected")
            break
        except OperationalError as e:
            if attempt == 4:
                raise
            wait_time = 2 ** attempt  # 1, 2, 4, 8 seconds
            logger.warning(
                "Database connection failed, retrying",
                attempt=attempt + 1,
                wait_seconds=wait_time,
                error=str(e),
            )
            await asyncio.sleep(wait_time)

    yield

    await close_db()
    logger.info("Enrollment Service shutdown complete")


app = FastAPI(
    title="Enrollment Service",
    description="Student registration and two-slot course enrollment",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Map domain errors to their status code and structured body."""
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_code=exc.error_code.value,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(students.router, prefix=f"{settings.api_v1_prefix}/students", tags=["Students"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "enrollment_service",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.enrollment_service.main:app",
        host=settings.service_host,
        port=settings.service_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
