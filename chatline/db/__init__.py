"""Database models, engine, session management, and schema bootstrap."""

from chatline.db.base import Base
from chatline.db.engine import dispose_engine, get_engine, verify_database_connection
from chatline.db.models import (
    DEFAULT_SESSION_TITLE,
    ChatSession,
    Message,
    MessageRole,
    User,
)
from chatline.db.schema import init_database
from chatline.db.session import (
    get_db,
    get_session_factory,
    persistence_guard,
    reset_session_factory,
)

__all__ = [
    # Base
    "Base",
    # Engine
    "get_engine",
    "verify_database_connection",
    "dispose_engine",
    # Schema
    "init_database",
    # Session
    "get_db",
    "get_session_factory",
    "persistence_guard",
    "reset_session_factory",
    # Models
    "DEFAULT_SESSION_TITLE",
    "ChatSession",
    "Message",
    "MessageRole",
    "User",
]
