"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scolarite.api.dependencies import close_services, init_services
from scolarite.api.models import APIResponse
from scolarite.api.routes import auth, courses, departments, enrollments, students, teachers, users
from scolarite.config import Settings
from scolarite.services import (
    BusinessRuleError,
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ScolariteError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

# Most specific first; the first matching class decides the status code
ERROR_STATUS_CODES: list[tuple[type[ScolariteError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (BusinessRuleError, 422),
    (ConsistencyError, 500),
]


def status_code_for(exc: ScolariteError) -> int:
    """HTTP status code for a service error."""
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Map service errors to APIResponse bodies with a matching status code."""

    @app.exception_handler(ScolariteError)
    async def service_error_handler(request: Request, exc: ScolariteError) -> JSONResponse:
        code = status_code_for(exc)
        if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            message = "Internal server error"
        else:
            message = str(exc)
        return JSONResponse(
            status_code=code,
            content=APIResponse[None](data=None, error=message).model_dump(),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    init_services(settings.database_path)
    logger.info("API started (database=%s)", settings.database_path)
    yield
    close_services()
    logger.info("API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="scolarite API",
        description="REST API for school administration - departments, courses, enrollments",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(departments.router, prefix="/api/v1")
    app.include_router(teachers.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")

    return app
