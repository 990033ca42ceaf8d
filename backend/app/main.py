"""
Q&A Forum Backend Application.

FastAPI application with session-cookie authentication,
categories, questions and answers.
"""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import Settings, settings
from app.core.database import close_db, init_db
from app.core.errors import SERVER_ERROR_MESSAGE, APIError
from app.modules.auth import SessionStore, build_session_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting Q&A Forum Backend...")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down Q&A Forum Backend...")

    await app.state.session_store.close()
    await close_db()

    logger.info("Shutdown complete")


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": message}."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> ORJSONResponse:
        return ORJSONResponse({"error": exc.error.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.debug(f"Rejected request body on {request.url.path}: {exc.errors()}")
        return ORJSONResponse({"error": "Invalid request body"}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        return ORJSONResponse(
            {"error": exc.detail},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return ORJSONResponse({"error": SERVER_ERROR_MESSAGE}, status_code=500)


def create_app(
    app_settings: Settings | None = None,
    session_store: SessionStore | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings override (defaults to environment settings)
        session_store: Session store override (defaults to configured backend)
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="""
        Q&A Forum Backend

        ## Features

        - **Accounts**: Registration, login and cookie sessions
        - **Forum**: Categories, questions and answers
        """,
        openapi_url=f"{app_settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.session_store = session_store or build_session_store(app_settings)

    # CORS middleware (credentials needed for the session cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix=app_settings.api_prefix)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict:
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "version": app_settings.app_version,
        }

    @app.get("/", tags=["System"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "docs": "/docs",
            "api": app_settings.api_prefix,
        }

    return app


app = create_app()
