"""
Concert and match storage re-exports.
"""
from core.db.concerts.concerts_store import (
    UPSERT_BATCH_SIZE,
    upsert_concerts,
    get_upcoming_concerts,
    get_concerts_by_source_id,
)
from core.db.concerts.matches_store import (
    upsert_matches,
    get_matched_concerts,
)

__all__ = [
    "UPSERT_BATCH_SIZE",
    "upsert_concerts",
    "get_upcoming_concerts",
    "get_concerts_by_source_id",
    "upsert_matches",
    "get_matched_concerts",
]
