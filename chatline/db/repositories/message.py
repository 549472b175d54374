"""Repository helpers for chat messages."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from chatline.core import ValidationError
from chatline.db.models import Message, MessageRole
from chatline.db.session import persistence_guard


def create_message(
    db: Session, session_id: int, role: MessageRole | str, content: str
) -> Message:
    """Append a message to a session."""
    try:
        role = MessageRole(role)
    except ValueError as exc:
        raise ValidationError(f"Invalid message role: {role}") from exc
    if not content or not content.strip():
        raise ValidationError("Message cannot be empty")

    message = Message(session_id=session_id, role=role.value, content=content)
    with persistence_guard(db, "save message"):
        db.add(message)
        db.commit()
        db.refresh(message)
    return message


def get_session_messages(db: Session, session_id: int) -> list[Message]:
    """Get all messages for a session, oldest first.

    Insertion order (id) breaks ties between equal timestamps.
    """
    stmt = (
        select(Message)
        .where(Message.session_id == session_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    with persistence_guard(db, "load messages"):
        return list(db.execute(stmt).scalars().all())


def clear_session_messages(db: Session, session_id: int) -> int:
    """Delete every message of a session, keeping the session. Returns the count."""
    stmt = delete(Message).where(Message.session_id == session_id)
    with persistence_guard(db, "clear messages"):
        result = db.execute(stmt)
        db.commit()
    return result.rowcount or 0
