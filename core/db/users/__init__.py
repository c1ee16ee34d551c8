"""
User-related storage helpers, split by responsibility.
"""
from core.db.users.user_store import (
    upsert_spotify_user,
    get_user_by_id,
    update_spotify_tokens,
)
from core.db.users.sessions import (
    create_session,
    delete_session,
    get_session,
    touch_session,
    SESSION_TTL,
    purge_expired_sessions,
)

__all__ = [
    "upsert_spotify_user",
    "get_user_by_id",
    "update_spotify_tokens",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
    "SESSION_TTL",
    "purge_expired_sessions",
]
