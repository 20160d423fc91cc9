"""Database configuration and session management."""

import logging
import time
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from timetrack.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def log_slow_queries(target: Engine, threshold_ms: int) -> None:
    """Warn about statements slower than ``threshold_ms``."""

    @event.listens_for(target, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _check_duration(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.perf_counter() - conn.info["query_start_time"].pop()) * 1000
        if elapsed_ms > threshold_ms:
            logger.warning("Slow query (%.0fms): %s", elapsed_ms, statement)


def build_engine(url: str) -> Engine:
    """Create an engine for ``url`` with the pool and SQLite tweaks applied."""
    if url.startswith("sqlite"):
        new_engine = create_engine(url, connect_args={"check_same_thread": False})
        enable_sqlite_foreign_keys(new_engine)
    else:
        new_engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_size=20,
            max_overflow=10,
            pool_timeout=2,
        )
    if settings.is_development:
        log_slow_queries(new_engine, settings.slow_query_ms)
    return new_engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from timetrack import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
