"""Chat session, message, and turn endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from chatline.api.schemas import (
    ChatRequestBody,
    CreateSessionRequest,
    message_to_response,
    session_to_response,
)
from chatline.core import ErrorCode, NotFoundError
from chatline.db import get_db
from chatline.db.repositories import (
    clear_session_messages,
    create_session,
    delete_session,
    get_session_messages,
    get_user_by_id,
    list_user_sessions,
)
from chatline.services import ChatService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


@router.get("/{user_id}")
def list_sessions_route(user_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    sessions = list_user_sessions(db, user_id)
    return {
        "success": True,
        "sessions": [session_to_response(chat_session) for chat_session in sessions],
    }


@router.post("")
def create_session_route(
    body: CreateSessionRequest, db: Session = Depends(get_db)
) -> dict[str, Any]:
    if get_user_by_id(db, body.user_id) is None:
        raise NotFoundError("User not found", code=ErrorCode.USER_NOT_FOUND)
    chat_session = create_session(db, body.user_id, title=body.title)
    return {"success": True, "session": session_to_response(chat_session)}


@router.delete("/{session_id}")
def delete_session_route(session_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    # Deleting an already-deleted session is not an error
    delete_session(db, session_id)
    return {"success": True}


@router.get("/{session_id}/messages")
def list_messages_route(session_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    messages = get_session_messages(db, session_id)
    return {
        "success": True,
        "messages": [message_to_response(message) for message in messages],
    }


@router.post("/{session_id}/chat")
async def chat_route(
    session_id: int,
    body: ChatRequestBody,
    db: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    reply = await chat_service.send_message(db, session_id, body.message)
    return {"success": True, "response": message_to_response(reply)}


@router.delete("/{session_id}/messages")
def clear_messages_route(session_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    clear_session_messages(db, session_id)
    return {"success": True}
