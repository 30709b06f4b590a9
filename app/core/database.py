"""Database engine, bounded connection pool and session factory."""

import logging
import math
import time

from sqlalchemy import create_engine, event, exc, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings

logger = logging.getLogger(__name__)


def _install_idle_eviction(engine: Engine, idle_timeout_sec: int) -> None:
    """Drop pooled connections that sat idle longer than idle_timeout_sec."""

    @event.listens_for(engine, "checkin")
    def _stamp_checkin(dbapi_connection, connection_record) -> None:
        connection_record.info["checked_in_at"] = time.monotonic()

    @event.listens_for(engine, "checkout")
    def _evict_idle(dbapi_connection, connection_record, connection_proxy) -> None:
        checked_in_at = connection_record.info.pop("checked_in_at", None)
        if checked_in_at is not None and time.monotonic() - checked_in_at > idle_timeout_sec:
            # The pool discards this connection and retries with a fresh one.
            raise exc.DisconnectionError("idle connection evicted")


def build_engine(settings: Settings) -> Engine:
    """Create the process-wide engine from settings (pool size, lifetime, timeouts)."""
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        kwargs: dict = {
            "connect_args": {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SEC},
        }
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.DEBUG, **kwargs)

    timeout_ms = int(settings.DB_TIMEOUT_SEC * 1000)
    engine = create_engine(
        url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_MIN_SIZE,
        max_overflow=settings.DB_POOL_MAX_SIZE - settings.DB_POOL_MIN_SIZE,
        pool_recycle=settings.DB_POOL_MAX_LIFETIME_SEC,
        pool_timeout=settings.DB_TIMEOUT_SEC,
        connect_args={
            "connect_timeout": max(1, math.ceil(settings.DB_TIMEOUT_SEC)),
            "options": f"-c statement_timeout={timeout_ms}",
        },
    )
    _install_idle_eviction(engine, settings.DB_POOL_IDLE_TIMEOUT_SEC)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    """Sessions are short-lived: one per store operation."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def ping_database(engine: Engine) -> None:
    """Run SELECT 1; raises SQLAlchemyError when the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def check_db_connected(engine: Engine) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        ping_database(engine)
        return True
    except exc.SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return False


# Inserts that hit a unique key on the generated id are retried this many times.
MAX_INSERT_ATTEMPTS = 3


def is_unique_violation(error: exc.IntegrityError) -> bool:
    """True when the integrity error is a unique/primary key violation (postgres 23505 or sqlite UNIQUE)."""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(orig if orig is not None else error).lower()
