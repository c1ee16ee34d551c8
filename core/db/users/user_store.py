"""
User CRUD and Spotify credential helpers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from core.db.base import get_conn

_USER_COLUMNS = """
    id, spotify_user_id, email, display_name, access_token, refresh_token,
    token_expires_at, created_at
"""


def upsert_spotify_user(
    spotify_user_id: str,
    email: str | None,
    display_name: str | None,
    access_token: str,
    refresh_token: str | None,
    token_expires_at: str | None,
) -> int:
    """
    Create the user for a Spotify account, or refresh its profile fields and tokens.
    A missing refresh_token keeps the stored one (Spotify does not always resend it).
    Returns the user id.
    """
    conn = get_conn()
    cur = conn.cursor()
    now = datetime.utcnow().isoformat(timespec="seconds")
    email_normalized = (email or "").strip().lower() or None

    cur.execute(
        """
        INSERT INTO users
          (spotify_user_id, email, display_name, access_token, refresh_token, token_expires_at, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (spotify_user_id) DO UPDATE SET
          email = EXCLUDED.email,
          display_name = EXCLUDED.display_name,
          access_token = EXCLUDED.access_token,
          refresh_token = COALESCE(EXCLUDED.refresh_token, users.refresh_token),
          token_expires_at = EXCLUDED.token_expires_at
        RETURNING id
        """,
        (
            spotify_user_id,
            email_normalized,
            display_name,
            access_token,
            refresh_token,
            token_expires_at,
            now,
        ),
    )
    row = cur.fetchone()
    user_id = int(row["id"]) if row else 0

    conn.commit()
    conn.close()
    return user_id


def get_user_by_id(user_id: int) -> Optional[Dict]:
    """Look up a user by numeric id. Returns dict or None."""
    conn = get_conn()
    cur = conn.cursor()

    cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
    row = cur.fetchone()
    conn.close()

    return dict(row) if row else None


def update_spotify_tokens(user_id: int, access_token: str, token_expires_at: str | None = None) -> None:
    """Store a freshly refreshed access token."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE users SET access_token = ?, token_expires_at = ? WHERE id = ?",
        (access_token, token_expires_at, user_id),
    )
    conn.commit()
    conn.close()


__all__ = [
    "upsert_spotify_user",
    "get_user_by_id",
    "update_spotify_tokens",
]
