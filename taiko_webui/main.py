"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taiko_webui import __version__
from taiko_webui.api.auth import router as auth_router
from taiko_webui.api.middleware import CorrelationIdMiddleware
from taiko_webui.api.routes import router
from taiko_webui.config import MIN_SESSION_SECRET_BYTES, get_settings
from taiko_webui.exceptions import AuthError
from taiko_webui.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    if settings.session_secret_is_weak:
        logger.warning(
            "session_secret_too_short",
            min_bytes=MIN_SESSION_SECRET_BYTES,
        )

    try:
        from taiko_webui.database import init_database, run_migrations

        await init_database()
        await run_migrations()
        logger.info("database_initialized")
    except Exception as e:
        logger.warning(
            "database_initialization_failed",
            error=str(e),
            note="Continuing without database - account endpoints will return 500",
        )

    logger.info("application_started", log_level=settings.log_level)

    yield

    # Shutdown
    try:
        from taiko_webui.database import close_database

        await close_database()
    except Exception as e:
        logger.warning("database_close_failed", error=str(e))

    logger.info("application_shutdown")


app = FastAPI(
    title="Taiko Web UI - Accounts API",
    description="Account registration, login and session cookies for the game-profile web UI",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies with 400 Bad Request."""
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    # Raw input may contain passwords; log only locations and messages
    logger.warning(
        "validation_error",
        correlation_id=correlation_id,
        detail=detail,
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


@app.exception_handler(AuthError)
async def auth_exception_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render domain errors raised by routes, services and dependencies."""
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers={"X-Correlation-Id": correlation_id},
    )


_settings = get_settings()

# CORS middleware for browser clients; cookies require credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["*"],
)

# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(router)
