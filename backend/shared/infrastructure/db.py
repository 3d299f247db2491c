"""
Engine, session factory and session helpers (SQLAlchemy 2.0).
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from shared.config.settings import DATABASE_URL


# PostgreSQL pool: (2 * cores) + 1 connections, never more than 20
POOL_SIZE = min((os.cpu_count() or 4) * 2 + 1, 20)


def _engine_options(url: str) -> dict[str, Any]:
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        # Local runs and tests. An in-memory database lives in one connection.
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,
        "pool_size": POOL_SIZE,
        "max_overflow": 15,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session for `Depends(get_db)`."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Session for code running outside a request (CLI commands, startup):

        with get_db_context() as db:
            report = asyncio.run(SubscriptionService(db, dispatcher).check_subscriptions())
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """Commit, or roll back and re-raise."""
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
