"""
FRAQTIV Intake FastAPI Application
Serverless-style backend for the intake wizard.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.api import intake
from backend.core.config import settings
from backend.core.rate_limit import RateLimitMiddleware, close_rate_limiter
from backend.core.sentry import capture_exception, init_sentry

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "There was an error submitting your information. Please try again."
MALFORMED_BODY_MESSAGE = "Please check your submission and try again."


# =============================================================================
# Lifespan Events
# =============================================================================


def validate_production_settings() -> None:
    """
    Validate critical settings at startup.
    Raises RuntimeError if insecure configuration detected in production.
    """
    if not settings.is_production:
        return

    if settings.debug:
        logger.error("SECURITY ERROR: DEBUG mode must be disabled in production (set DEBUG=false)")
        raise RuntimeError("Cannot start in production with DEBUG enabled")

    if not settings.sendgrid_api_key:
        logger.warning("SENDGRID_API_KEY is not set - intake notifications will not be delivered")

    if settings.rate_limit_backend == "memory":
        logger.warning("In-memory rate limiting only bounds a single instance")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.

    Startup:
    - Validate production settings
    - Initialize Sentry

    Shutdown:
    - Close the rate limit store
    """
    logger.info(f"Starting {settings.app_name} intake API...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Version: {settings.app_version}")

    validate_production_settings()

    if init_sentry():
        logger.info("Sentry error tracking enabled")
    else:
        logger.info("Sentry error tracking disabled (no DSN configured)")

    yield

    logger.info(f"Shutting down {settings.app_name} intake API...")
    await close_rate_limiter()
    logger.info("Rate limiter closed")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=f"{settings.app_name} Intake API",
    description="Receives intake wizard submissions and notifies the team.",
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# =============================================================================
# CORS Middleware
# =============================================================================


def get_cors_origins() -> list[str]:
    """Only the production site may call the API in production."""
    if settings.is_production:
        return [settings.production_origin]
    return ["*"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# =============================================================================
# Rate Limiting Middleware
# =============================================================================

if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware)
    logger.info("Rate limiting middleware enabled")
else:
    logger.info("Rate limiting middleware disabled")

# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies that do not parse as a submission are a plain 400."""
    logger.info(f"Malformed intake body: {len(exc.errors())} error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": MALFORMED_BODY_MESSAGE},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internal details."""
    logger.exception(f"Unexpected error: {exc}")

    capture_exception(
        exc,
        extra={
            "request_method": request.method,
            "request_path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": GENERIC_ERROR_MESSAGE},
    )


# =============================================================================
# API Routers
# =============================================================================

app.include_router(intake.router)


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
