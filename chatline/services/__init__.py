"""Domain services: identity resolution and chat orchestration."""

from chatline.services.chat_service import ChatService, TurnState, derive_title
from chatline.services.identity import normalize_username, resolve_user
from chatline.services.turn_locks import SessionLockManager

__all__ = [
    "ChatService",
    "SessionLockManager",
    "TurnState",
    "derive_title",
    "normalize_username",
    "resolve_user",
]
