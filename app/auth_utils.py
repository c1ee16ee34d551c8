"""
Session cookie handling and signed-in user lookup.
"""
from __future__ import annotations

import os

from fastapi import Request
from fastapi.responses import Response

from core.database import SESSION_TTL, delete_session, get_session, get_user_by_id, touch_session

SESSION_COOKIE_NAME = "session_id"
SECURE_COOKIES = (
    os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes")
    or os.getenv("PUBLIC_BASE_URL", "").lower().startswith("https://")
)


def get_current_user(request: Request):
    """
    Return (user, session_token) for the request's session cookie.
    user is None when there is no cookie, the session expired, or its user is gone.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None, None

    session = get_session(token)
    if not session:
        return None, token

    user = get_user_by_id(session["user_id"])
    if not user:
        delete_session(token)
        return None, token

    touch_session(session)
    return user, token


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=int(SESSION_TTL.total_seconds()),
        samesite="lax",
        secure=SECURE_COOKIES,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)
