"""Username login: resolve or register a user."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chatline.api.schemas import LoginRequest, user_to_response
from chatline.db import get_db
from chatline.services import resolve_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
def login_route(body: LoginRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = resolve_user(db, body.username)
    return {"success": True, "user": user_to_response(user)}
