"""
Storage facade: re-exports every store helper so routes and workers import from one place.
"""
from core.db.base import PAGE_SIZE, get_conn, paginate
from core.db.schema import init_db, seed_default_cities
from core.db.users import (
    SESSION_TTL,
    purge_expired_sessions,
    create_session,
    delete_session,
    get_session,
    get_user_by_id,
    touch_session,
    update_spotify_tokens,
    upsert_spotify_user,
)
from core.db.profiles import (
    DIGEST_PREFERENCES,
    ensure_profile,
    get_cities,
    get_city_by_name,
    get_digest_subscribers,
    get_profile,
    get_profiles,
    update_digest_preference,
    update_profile,
)
from core.db.artists import (
    count_user_artists,
    get_user_artist_names,
    link_user_artists,
    upsert_artists,
)
from core.db.concerts import (
    get_concerts_by_source_id,
    get_matched_concerts,
    get_upcoming_concerts,
    upsert_concerts,
    upsert_matches,
)

__all__ = [
    "PAGE_SIZE",
    "get_conn",
    "paginate",
    "init_db",
    "seed_default_cities",
    "SESSION_TTL",
    "purge_expired_sessions",
    "create_session",
    "delete_session",
    "get_session",
    "get_user_by_id",
    "touch_session",
    "update_spotify_tokens",
    "upsert_spotify_user",
    "DIGEST_PREFERENCES",
    "ensure_profile",
    "get_cities",
    "get_city_by_name",
    "get_digest_subscribers",
    "get_profile",
    "get_profiles",
    "update_digest_preference",
    "update_profile",
    "count_user_artists",
    "get_user_artist_names",
    "link_user_artists",
    "upsert_artists",
    "get_concerts_by_source_id",
    "get_matched_concerts",
    "get_upcoming_concerts",
    "upsert_concerts",
    "upsert_matches",
]
