"""Tracker API FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from tracker_api.config import settings, validate_auth_token_key
from tracker_api.core.errors import TrackerError
from tracker_api.database import close_database
from tracker_api.logging_config import get_logger, setup_logging
from tracker_api.middleware import CorrelationIdMiddleware
from tracker_api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from tracker_api.routers import health, me, pairing, pregnancies, sharing

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Migrations are applied by `alembic upgrade head` before the server starts
    validate_auth_token_key()
    logger.info("Tracker API started")

    yield

    logger.info("Shutting down Tracker API...")
    await close_database()
    logger.info("Tracker API shutdown complete")


app = FastAPI(
    title="Tracker API",
    description="Pregnancy tracker data service with invite-code sharing",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Map expected business outcomes to their status code and error code."""
    if exc.status_code >= 500:
        logger.error("Unhandled tracker error", code=exc.code, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is an infrastructure failure; never leak its details."""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
    )


# Middleware (first added = innermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(me.router)
app.include_router(pregnancies.router)
app.include_router(sharing.router)
app.include_router(pairing.router)


@app.get("/")
async def root() -> dict[str, str]:
    return {"service": settings.service_name, "status": "running"}
