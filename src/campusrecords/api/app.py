"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campusrecords.api.dependencies import close_records, init_records, set_records
from campusrecords.api.models import APIResponse
from campusrecords.api.routes import courses, enrollments, grades, students, transcripts
from campusrecords.store.exceptions import (
    CreditLimitExceededError,
    DuplicateEnrollmentError,
    DuplicateEntityError,
    InvalidInputError,
    NotFoundError,
    RecordsError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from campusrecords.config import RecordsConfig
    from campusrecords.registry import CampusRecords

# Error kinds and the HTTP status each maps to; subclasses are matched by MRO
ERROR_STATUS: dict[type[RecordsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateEntityError: status.HTTP_409_CONFLICT,
    DuplicateEnrollmentError: status.HTTP_409_CONFLICT,
    CreditLimitExceededError: 422,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    preloaded = getattr(app.state, "records", None)
    if preloaded is not None:
        set_records(preloaded)
    else:
        init_records(getattr(app.state, "config", None))

    yield
    # Shutdown
    close_records()


def register_exception_handlers(app: FastAPI) -> None:
    """Map records errors onto HTTP responses wrapped in APIResponse."""

    async def records_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_type in type(exc).__mro__:
            if error_type in ERROR_STATUS:
                code = ERROR_STATUS[error_type]
                break
        message = str(exc)
        if code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            message = "Internal server error"
        return JSONResponse(
            status_code=code,
            content=APIResponse[None](data=None, error=message).model_dump(),
        )

    for error_type in (*ERROR_STATUS, RecordsError):
        app.add_exception_handler(error_type, records_error_handler)


def create_app(
    config: RecordsConfig | None = None,
    records: CampusRecords | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration for the records created at startup.
        records: Already-populated records to serve instead of creating new ones.
    """
    app = FastAPI(
        title="Campus Records API",
        description="REST API for Campus Records - students, courses, enrollments and grades",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config = config
    app.state.records = records

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(grades.router, prefix="/api/v1")
    app.include_router(transcripts.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
