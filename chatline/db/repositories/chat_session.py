"""Repository helpers for chat sessions."""

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from chatline.core import ValidationError
from chatline.db.models import DEFAULT_SESSION_TITLE, ChatSession
from chatline.db.session import persistence_guard


def create_session(
    db: Session, user_id: int, title: str | None = DEFAULT_SESSION_TITLE
) -> ChatSession:
    """Create a new chat session for the given user."""
    chat_session = ChatSession(
        user_id=user_id,
        title=title.strip() if title and title.strip() else DEFAULT_SESSION_TITLE,
    )
    with persistence_guard(db, "create session"):
        db.add(chat_session)
        db.commit()
        db.refresh(chat_session)
    return chat_session


def get_session(db: Session, session_id: int) -> ChatSession | None:
    """Fetch a chat session by id."""
    with persistence_guard(db, "load session"):
        return db.get(ChatSession, session_id)


def list_user_sessions(db: Session, user_id: int) -> list[ChatSession]:
    """List sessions belonging to the user, newest first."""
    stmt = (
        select(ChatSession)
        .where(ChatSession.user_id == user_id)
        .order_by(ChatSession.created_at.desc(), ChatSession.id.desc())
    )
    with persistence_guard(db, "list sessions"):
        return list(db.execute(stmt).scalars().all())


def rename_session(db: Session, session_id: int, title: str) -> None:
    """Overwrite a session title. Missing sessions are ignored."""
    if not title or not title.strip():
        raise ValidationError("Title cannot be empty")
    stmt = update(ChatSession).where(ChatSession.id == session_id).values(title=title)
    with persistence_guard(db, "rename session"):
        db.execute(stmt)
        db.commit()


def delete_session(db: Session, session_id: int) -> bool:
    """
    Delete a session and its messages in one transaction.

    Returns False when the session does not exist.
    """
    with persistence_guard(db, "delete session"):
        chat_session = db.get(ChatSession, session_id)
        if chat_session is None:
            return False
        db.delete(chat_session)
        db.commit()
    return True
