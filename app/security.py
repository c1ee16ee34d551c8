"""
Lightweight CSRF, rate limit, cron-secret and signed-link helpers.
"""
from __future__ import annotations

import hashlib
import hmac
import os
import secrets
import time
from typing import Dict

CSRF_COOKIE_NAME = "csrf_token"
SECURE_COOKIES = (
    os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes")
    or os.getenv("PUBLIC_BASE_URL", "").lower().startswith("https://")
)


def issue_csrf_token(existing: str | None = None) -> str:
    """Return a CSRF token (re-use existing if provided, else create a new one)."""
    return existing or secrets.token_urlsafe(16)


def attach_csrf_cookie(response, token: str) -> None:
    """
    Attach the CSRF token as a non-HTTPOnly cookie (double-submit pattern).
    """
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,
        samesite="lax",
        secure=SECURE_COOKIES,
    )


def validate_csrf(request, form_token: str | None) -> bool:
    """Compare the submitted token with the cookie value using constant-time compare."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    form_token = form_token or ""
    if not cookie_token or not form_token:
        return False
    return hmac.compare_digest(cookie_token, form_token)


# -------- Cron endpoints --------

def is_cron_authorized(authorization: str | None) -> bool:
    """
    True when the Authorization header is `Bearer $CRON_SECRET`.
    An unset CRON_SECRET rejects every request.
    """
    cron_secret = os.getenv("CRON_SECRET") or ""
    if not cron_secret:
        return False
    return hmac.compare_digest(authorization or "", f"Bearer {cron_secret}")


# -------- Unsubscribe links --------

def _link_secret() -> bytes:
    secret = os.getenv("UNSUBSCRIBE_SECRET") or os.getenv("CRON_SECRET")
    if not secret:
        raise RuntimeError("Set UNSUBSCRIBE_SECRET (or CRON_SECRET) to sign unsubscribe links.")
    return secret.encode("utf-8")


def build_unsubscribe_token(user_id: int) -> str:
    return hmac.new(_link_secret(), f"unsubscribe:{user_id}".encode("utf-8"), hashlib.sha256).hexdigest()


def verify_unsubscribe_token(user_id: int, token: str | None) -> bool:
    if not token:
        return False
    return hmac.compare_digest(build_unsubscribe_token(user_id), token)


# -------- Rate limiting (in-memory, per process) --------
_rate_state: Dict[str, list[float]] = {}


def check_rate_limit(key: str, limit: int = 5, window_seconds: int = 60) -> tuple[bool, int]:
    """
    Sliding-window limiter. Returns (allowed, retry_after_seconds); retry_after is 0 when allowed.
    """
    now = time.time()
    history = [t for t in _rate_state.get(key, []) if t > now - window_seconds]
    if len(history) >= limit:
        _rate_state[key] = history
        return False, max(1, int(history[0] + window_seconds - now) + 1)
    history.append(now)
    _rate_state[key] = history
    return True, 0


__all__ = [
    "CSRF_COOKIE_NAME",
    "issue_csrf_token",
    "attach_csrf_cookie",
    "validate_csrf",
    "is_cron_authorized",
    "build_unsubscribe_token",
    "verify_unsubscribe_token",
    "check_rate_limit",
]
