"""Resolve a raw username to a stable user identity."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chatline.core import PersistenceError, ValidationError, get_logger
from chatline.db.models import USERNAME_MAX_LENGTH, User
from chatline.db.repositories import create_user, get_user_by_username

logger = get_logger(__name__)

USERNAME_MIN_LENGTH = 2


def normalize_username(raw_username: str | None) -> str:
    """Trim and lowercase, enforcing length bounds."""
    username = (raw_username or "").strip().lower()
    if len(username) < USERNAME_MIN_LENGTH:
        raise ValidationError(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters"
        )
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be at most {USERNAME_MAX_LENGTH} characters"
        )
    return username


def resolve_user(db: Session, raw_username: str | None) -> User:
    """
    Return the user for ``raw_username``, creating it on first sighting.

    Uniqueness is enforced by the store: when a concurrent request inserts
    the same username first, the unique constraint fires and the existing
    row is returned instead.
    """
    username = normalize_username(raw_username)

    user = get_user_by_username(db, username)
    if user is not None:
        return user

    try:
        user = create_user(db, username)
    except IntegrityError:
        db.rollback()
        user = get_user_by_username(db, username)
        if user is None:
            raise PersistenceError("Failed to create user")
        return user
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Failed to create user") from exc

    logger.info("User created", data={"user_id": user.id})
    return user
