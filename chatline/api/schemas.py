"""Request and response models for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from chatline.db.models import TITLE_MAX_LENGTH


class LoginRequest(BaseModel):
    username: str | None = None


class CreateSessionRequest(BaseModel):
    user_id: int = Field(..., alias="userId")
    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)

    model_config = {"populate_by_name": True}


class ChatRequestBody(BaseModel):
    message: str | None = None


class UserResponse(BaseModel):
    id: int
    username: str
    created_at: str


class SessionResponse(BaseModel):
    id: int
    user_id: int
    title: str
    created_at: str


class MessageResponse(BaseModel):
    id: int
    session_id: int
    role: str
    content: str
    created_at: str


def user_to_response(user: Any) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        created_at=user.created_at.isoformat(),
    )


def session_to_response(chat_session: Any) -> SessionResponse:
    return SessionResponse(
        id=chat_session.id,
        user_id=chat_session.user_id,
        title=chat_session.title,
        created_at=chat_session.created_at.isoformat(),
    )


def message_to_response(message: Any) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        session_id=message.session_id,
        role=message.role,
        content=message.content,
        created_at=message.created_at.isoformat(),
    )
