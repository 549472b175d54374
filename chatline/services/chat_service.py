"""Chat orchestration: one inbound user message to one persisted reply."""

from __future__ import annotations

from enum import Enum

from sqlalchemy.orm import Session

from chatline.core import (
    AppError,
    ErrorCode,
    NotFoundError,
    ValidationError,
    get_logger,
)
from chatline.db.models import Message, MessageRole
from chatline.db.repositories import (
    create_message,
    get_session,
    get_session_messages,
    rename_session,
)
from chatline.providers import ProviderClient
from chatline.services.turn_locks import SessionLockManager

logger = get_logger(__name__)

TITLE_MAX_CHARS = 50


class TurnState(str, Enum):
    """Progress markers for a single turn."""

    RECEIVED = "received"
    USER_PERSISTED = "user_persisted"
    HISTORY_LOADED = "history_loaded"
    PROVIDER_INVOKED = "provider_invoked"
    ASSISTANT_PERSISTED = "assistant_persisted"
    RETITLED = "retitled"


def derive_title(raw_message: str) -> str:
    """First TITLE_MAX_CHARS characters of the message.

    Falls back to the stripped message when the prefix is only whitespace.
    """
    title = raw_message[:TITLE_MAX_CHARS]
    if not title.strip():
        title = raw_message.strip()[:TITLE_MAX_CHARS]
    return title


class ChatService:
    """Runs chat turns against the session store and the provider."""

    def __init__(
        self,
        provider_client: ProviderClient,
        locks: SessionLockManager | None = None,
    ):
        self.provider_client = provider_client
        self.locks = locks or SessionLockManager()

    async def send_message(
        self, db: Session, session_id: int, raw_message: str | None
    ) -> Message:
        """
        Process one turn and return the persisted assistant message.

        Turns on the same session run one at a time; turns on different
        sessions run concurrently.
        """
        if not raw_message or not raw_message.strip():
            raise ValidationError("Message cannot be empty")

        async with self.locks.hold(session_id):
            return await self._run_turn(db, session_id, raw_message)

    async def _run_turn(self, db: Session, session_id: int, raw_message: str) -> Message:
        state = TurnState.RECEIVED
        if get_session(db, session_id) is None:
            raise NotFoundError("Session not found", code=ErrorCode.SESSION_NOT_FOUND)

        logger.info("Turn started", data={"session_id": session_id})

        try:
            # The user message stays stored even if a later step fails
            user_message = create_message(db, session_id, MessageRole.USER, raw_message)
            state = TurnState.USER_PERSISTED

            history = get_session_messages(db, session_id)
            state = TurnState.HISTORY_LOADED

            prior_messages = [m for m in history if m.id != user_message.id]
            # Zero messages before this turn; equivalent to len(history) - 1 <= 0
            is_first_turn = len(prior_messages) == 0

            reply = await self.provider_client.complete(
                self.provider_client.system_prompt, prior_messages, raw_message
            )
            state = TurnState.PROVIDER_INVOKED

            assistant_message = create_message(
                db, session_id, MessageRole.ASSISTANT, reply
            )
            state = TurnState.ASSISTANT_PERSISTED
        except AppError as exc:
            logger.warning(
                "Turn failed",
                data={
                    "session_id": session_id,
                    "state": state.value,
                    "code": exc.code.value,
                },
            )
            raise

        if is_first_turn and self._assign_title(db, session_id, raw_message):
            state = TurnState.RETITLED

        logger.info(
            "Turn completed",
            data={
                "session_id": session_id,
                "message_id": assistant_message.id,
                "retitled": state is TurnState.RETITLED,
            },
        )
        return assistant_message

    def _assign_title(self, db: Session, session_id: int, raw_message: str) -> bool:
        """Best-effort rename; failures are logged and never fail the turn."""
        try:
            rename_session(db, session_id, derive_title(raw_message))
        except AppError as exc:
            logger.warning(
                "Session title update failed",
                data={"session_id": session_id, "error": exc.message},
            )
            return False
        return True
