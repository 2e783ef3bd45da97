from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from eventsite.app.api import admin_router, auth_router, me_router, staff_router
from eventsite.app.core.config import settings
from eventsite.app.core.logging import get_logger, setup_logging
from eventsite.app.db import models  # noqa: F401 - import to register models
from eventsite.app.db.async_session import close_async_engine, get_async_engine
from eventsite.app.db.init_db import init_database, verify_connection
from eventsite.app.exceptions import EventsiteException
from eventsite.app.middleware.request_id import RequestIdMiddleware, get_request_id


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Verify the database and create missing tables on startup, release
        the connection pool on shutdown."""
        if not await verify_connection():
            logger.error("Database connection failed!")
            raise RuntimeError("Cannot connect to database")

        await init_database()
        logger.info(
            "Application startup complete",
            extra={"debug_mode": settings.debug},
        )

        yield

        await close_async_engine()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Event Site",
        description="Attendee check-in and food/drink redemption for a company event",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
        max_age=600,
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(staff_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check with database status."""
        health_status = {"status": "ok", "components": {}}

        try:
            async with get_async_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            health_status["components"]["database"] = {"status": "ok"}
        except Exception as e:
            health_status["status"] = "degraded"
            health_status["components"]["database"] = {
                "status": "error",
                "error": str(e)[:100],  # Truncate for security
            }

        return health_status

    @app.exception_handler(EventsiteException)
    async def eventsite_exception_handler(
        request: Request, exc: EventsiteException
    ) -> JSONResponse:
        """Map application exceptions to their HTTP status."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed payloads are a 400, like every other input error."""
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_input",
                "message": "Invalid input",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        The traceback is logged server-side and never returned; debug mode
        adds the exception message to the response.
        """
        request_id = get_request_id(request)

        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
            },
        )

        content = {
            "error": "internal_error",
            "message": str(exc) if settings.debug else "Internal server error",
            "request_id": request_id,
        }
        if settings.debug:
            content["exception_type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    return app


# Create the application instance
app = create_app()
