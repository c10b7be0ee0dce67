"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the review aggregation engine.

We use SYNCHRONOUS SQLAlchemy: every ledger mutation is a short transaction
that reads reviews, writes one or more rows and recomputes a handful of
statistics rows. Nothing here benefits from an event loop.

Unit of Work Pattern
====================
Each ledger mutation runs inside unit_of_work(session):
1. The ledger write, score normalization and statistics recompute share one
   transaction
2. Commit on success, rollback on any exception
3. Per-key locks registered on the unit of work are released only after the
   commit or rollback has finished

Nested calls join the outermost unit of work instead of committing early, so
a catalog delete that cascades through the ledger is still one transaction.
"""

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bittermelon.config import get_settings

settings = get_settings()

# Key under which the active unit of work is stored in Session.info
_UNIT_OF_WORK_KEY = "bittermelon.unit_of_work"


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for the configured backend."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


# =============================================================================
# Database Engine
# =============================================================================
engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # Log SQL in debug mode
    **_engine_options(settings.database_url),
)


# =============================================================================
# Session Factory
# =============================================================================
# - autocommit=False: the unit of work decides when to commit
# - autoflush=False: writes are flushed explicitly before recomputes

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover models for migrations.
    """
    pass


# =============================================================================
# Unit of Work
# =============================================================================
@contextmanager
def unit_of_work(session: Session) -> Iterator[ExitStack]:
    """
    Run a block as one atomic unit of work.

    Yields an ExitStack; context managers entered on it (per-key locks) are
    exited after the transaction has been committed or rolled back.

    If the session is already inside a unit of work, the existing stack is
    yielded and commit/rollback is left to the outermost caller.

    Usage:
        with unit_of_work(db) as uow:
            uow.enter_context(locks.acquire(keys))
            db.add(review)
    """
    active = session.info.get(_UNIT_OF_WORK_KEY)
    if active is not None:
        yield active
        return

    with ExitStack() as stack:
        session.info[_UNIT_OF_WORK_KEY] = stack
        try:
            yield stack
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.info.pop(_UNIT_OF_WORK_KEY, None)


def in_unit_of_work(session: Session) -> bool:
    """Check whether the session is inside a unit of work."""
    return _UNIT_OF_WORK_KEY in session.info


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    WARNING: In production, use Alembic migrations instead!
    """
    Base.metadata.create_all(bind=engine)

