"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timetrack.api import auth, reports, subjects, time_entries
from timetrack.config import get_settings
from timetrack.database import engine
from timetrack.errors import register_exception_handlers
from timetrack.logging_config import configure_logging
from timetrack.rate_limit import RateLimiter, RateLimitMiddleware

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info("Time tracker API starting (environment=%s)", settings.environment)
    yield
    engine.dispose()
    logger.info("Database pool closed")


app = FastAPI(
    title="Time Tracker API",
    description="Multi-tenant time tracking: subjects, time entries and reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.rate_limiter = RateLimiter(
    window_seconds=settings.rate_limit_window.total_seconds(),
    max_requests=settings.rate_limit_max_requests,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Total-Count",
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
        "Retry-After",
    ],
)
app.add_middleware(RateLimitMiddleware, path_prefix="/auth")

register_exception_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(subjects.router)
app.include_router(time_entries.router)
app.include_router(reports.router)


@app.get("/healthz")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": time.monotonic() - STARTED_AT,
    }
