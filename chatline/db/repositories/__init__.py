"""Database repositories for data access."""

from chatline.db.repositories.chat_session import (
    create_session,
    delete_session,
    get_session,
    list_user_sessions,
    rename_session,
)
from chatline.db.repositories.message import (
    clear_session_messages,
    create_message,
    get_session_messages,
)
from chatline.db.repositories.user import (
    create_user,
    get_user_by_id,
    get_user_by_username,
)

__all__ = [
    # User
    "get_user_by_id",
    "get_user_by_username",
    "create_user",
    # Sessions
    "create_session",
    "get_session",
    "list_user_sessions",
    "rename_session",
    "delete_session",
    # Messages
    "create_message",
    "get_session_messages",
    "clear_session_messages",
]
