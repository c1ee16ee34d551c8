"""
Browser sessions opened after Spotify sign-in.

Sessions are long-lived (the weekly page is the main surface) and slide forward on use.
The sliding write is throttled so an ordinary page view does not always cost an UPDATE.
"""
from __future__ import annotations

import os
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

from core.db.base import get_conn

SESSION_TTL = timedelta(days=int(os.getenv("SESSION_TTL_DAYS", "30")))
TOUCH_INTERVAL = timedelta(hours=1)


def _iso(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def purge_expired_sessions() -> int:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("DELETE FROM sessions WHERE expires_at <= ?", (_iso(datetime.utcnow()),))
    removed = cur.rowcount
    conn.commit()
    conn.close()
    return removed


def create_session(user_id: int) -> str:
    """Open a session for user_id and return its token. Expired sessions are cleared on the way."""
    purge_expired_sessions()

    token = secrets.token_urlsafe(32)
    now = datetime.utcnow()
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO sessions (id, user_id, created_at, last_seen_at, expires_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (token, user_id, _iso(now), _iso(now), _iso(now + SESSION_TTL)),
    )
    conn.commit()
    conn.close()
    return token


def delete_session(session_id: str) -> None:
    if not session_id:
        return

    conn = get_conn()
    cur = conn.cursor()
    cur.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
    conn.commit()
    conn.close()


def get_session(session_id: str) -> Optional[Dict]:
    """Return the live session for a token, or None when it is unknown or expired."""
    if not session_id:
        return None

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, user_id, last_seen_at, expires_at
        FROM sessions
        WHERE id = ? AND expires_at > ?
        """,
        (session_id, _iso(datetime.utcnow())),
    )
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def touch_session(session: Dict) -> bool:
    """
    Slide the session's expiry forward, at most once per TOUCH_INTERVAL.
    Returns True when the row was written.
    """
    now = datetime.utcnow()
    try:
        last_seen = datetime.fromisoformat(session.get("last_seen_at") or "")
    except ValueError:
        last_seen = None
    if last_seen and now - last_seen < TOUCH_INTERVAL:
        return False

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE sessions SET last_seen_at = ?, expires_at = ? WHERE id = ?",
        (_iso(now), _iso(now + SESSION_TTL), session["id"]),
    )
    conn.commit()
    conn.close()
    return True


__all__ = [
    "SESSION_TTL",
    "TOUCH_INTERVAL",
    "purge_expired_sessions",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
]
