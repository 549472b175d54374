"""
Database session management.

Provides session factory, FastAPI dependency, and the guard that turns
driver failures into PersistenceError.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from chatline.core import PersistenceError, get_logger
from chatline.db.engine import get_engine

logger = get_logger(__name__)

_session_factory: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Returns cached factory instance, creating it on first call.
    """
    global _session_factory

    if _session_factory is None:
        engine = get_engine()
        _session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    return _session_factory


def reset_session_factory() -> None:
    """Forget the cached factory (used after the engine is disposed)."""
    global _session_factory
    _session_factory = None


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Yields a session and ensures it's closed after the request.
    """
    factory = get_session_factory()
    session = factory()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def persistence_guard(db: Session, action: str) -> Iterator[None]:
    """Roll back and raise PersistenceError if the store fails inside the block."""
    try:
        yield
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Constraint violation during {action}", data={"error": str(exc.orig)})
        raise PersistenceError(
            f"Failed to {action}", details={"reason": "constraint violation"}
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database failure during {action}", data={"error": str(exc)})
        raise PersistenceError(f"Failed to {action}") from exc
