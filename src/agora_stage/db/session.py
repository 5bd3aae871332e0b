"""Database session configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterator
from contextlib import AbstractContextManager, contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from agora_stage.core.errors import AgoraError, ErrorCode, InternalError
from agora_stage.core.settings import settings

logger = logging.getLogger(__name__)

# Opens a fresh session for work that outlives the request (notification fan-out).
SessionFactory = Callable[[], AbstractContextManager[Session]]


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import agora_stage.models  # noqa: E402,F401

_connect_args = (
    {"check_same_thread": False}
    if settings.effective_database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit the work done in the block, or roll it back on any failure.

    Domain errors are re-raised unchanged. Database errors are logged and
    surfaced as :class:`InternalError` so callers never see driver exceptions.
    """
    try:
        yield db
        db.commit()
    except AgoraError:
        db.rollback()
        raise
    except SQLAlchemyError as err:
        db.rollback()
        logger.exception("Database error; transaction rolled back")
        raise InternalError(ErrorCode.INTERNAL_ERROR, "Database operation failed") from err


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
