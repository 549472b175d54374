"""
User repository for database operations.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from chatline.db.models import User
from chatline.db.session import persistence_guard


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get user by ID."""
    with persistence_guard(db, "load user"):
        return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get user by an already-normalized username."""
    stmt = select(User).where(User.username == username)
    with persistence_guard(db, "load user"):
        return db.execute(stmt).scalar_one_or_none()


def create_user(db: Session, username: str) -> User:
    """
    Insert a new user.

    Raises IntegrityError (unwrapped) when the username already exists so
    callers racing on the same name can recover by re-reading.
    """
    user = User(username=username)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
