import logging
import os
import secrets

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from app.auth_utils import SECURE_COOKIES, clear_session_cookie, get_current_user, set_session_cookie
from core.database import (
    create_session,
    delete_session,
    ensure_profile,
    get_city_by_name,
    upsert_spotify_user,
)
from core.spotify import (
    SpotifyError,
    build_authorize_url,
    exchange_code,
    expires_at_from,
    get_current_user_profile,
)
from worker.ingest import DEFAULT_CITY

router = APIRouter()
log = logging.getLogger("auth")

STATE_COOKIE_NAME = "spotify_auth_state"
STATE_COOKIE_MAX_AGE = 600  # 10 minutes


def _redirect_uri(request: Request) -> str:
    explicit = os.getenv("SPOTIFY_REDIRECT_URI")
    if explicit:
        return explicit
    base = (os.getenv("PUBLIC_BASE_URL") or str(request.base_url)).rstrip("/")
    return f"{base}/auth/callback"


def _auth_failed() -> RedirectResponse:
    response = RedirectResponse(url="/?error=auth_failed", status_code=303)
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.get("/login")
def login(request: Request):
    user, _ = get_current_user(request)
    if user:
        return RedirectResponse(url="/weekly", status_code=303)

    state = secrets.token_urlsafe(16)
    response = RedirectResponse(url=build_authorize_url(state, _redirect_uri(request)), status_code=303)
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=state,
        httponly=True,
        max_age=STATE_COOKIE_MAX_AGE,
        samesite="lax",
        secure=SECURE_COOKIES,
    )
    return response


@router.get("/auth/callback")
def auth_callback(request: Request, code: str | None = None, state: str | None = None, error: str | None = None):
    """
    Spotify redirects here after consent. On success the user row, default profile and
    session are created and the browser lands on the weekly page.
    """
    expected_state = request.cookies.get(STATE_COOKIE_NAME) or ""
    if error or not code or not state or not secrets.compare_digest(expected_state, state):
        log.warning("Rejected OAuth callback", extra={"error": error or "state_mismatch"})
        return _auth_failed()

    try:
        tokens = exchange_code(code, _redirect_uri(request))
        me = get_current_user_profile(tokens["access_token"])
    except SpotifyError as e:
        log.error("Spotify sign-in failed", extra={"error": str(e)})
        return _auth_failed()

    spotify_user_id = me.get("id")
    if not spotify_user_id:
        return _auth_failed()

    user_id = upsert_spotify_user(
        spotify_user_id=spotify_user_id,
        email=me.get("email"),
        display_name=me.get("display_name"),
        access_token=tokens["access_token"],
        refresh_token=tokens.get("refresh_token"),
        token_expires_at=expires_at_from(tokens.get("expires_in")),
    )

    city = get_city_by_name(os.getenv("INGEST_CITY") or DEFAULT_CITY)
    ensure_profile(user_id, city["id"] if city else None)

    token = create_session(user_id)
    response = RedirectResponse(url="/weekly", status_code=303)
    response.delete_cookie(STATE_COOKIE_NAME)
    set_session_cookie(response, token)
    return response


@router.get("/logout")
def logout(request: Request):
    _, token = get_current_user(request)
    if token:
        delete_session(token)
    response = RedirectResponse(url="/", status_code=303)
    clear_session_cookie(response)
    return response
