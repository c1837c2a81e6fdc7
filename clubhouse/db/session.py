"""Database engine, session factory, and dependency injection."""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from clubhouse.core.config import settings
from clubhouse.core.exceptions import InternalError, ResourceConflictError

logger = logging.getLogger("clubhouse")

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a DB session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that don't exist yet."""
    from clubhouse.db.base import Base
    import clubhouse.models  # noqa: F401  registers every model on Base.metadata

    Base.metadata.create_all(bind=engine)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a unit of writes and commit it, or roll everything back.

    Domain errors raised inside the block pass through unchanged. A unique-constraint
    violation becomes ResourceConflictError; any other store failure becomes
    InternalError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.debug("Integrity violation: %s", e.orig)
        raise ResourceConflictError("Resource already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store failure")
        raise InternalError("Storage failure") from e
    except Exception:
        db.rollback()
        raise
