"""
Artist library storage re-exports.
"""
from core.db.artists.artist_store import (
    upsert_artists,
    link_user_artists,
    get_user_artist_names,
    count_user_artists,
)

__all__ = [
    "upsert_artists",
    "link_user_artists",
    "get_user_artist_names",
    "count_user_artists",
]
