"""
Profile and city storage re-exports.
"""
from core.db.profiles.profile_store import (
    DIGEST_PREFERENCES,
    DEFAULT_DIGEST_PREFERENCE,
    get_cities,
    get_city_by_name,
    ensure_profile,
    get_profile,
    get_profiles,
    get_digest_subscribers,
    update_profile,
    update_digest_preference,
)

__all__ = [
    "DIGEST_PREFERENCES",
    "DEFAULT_DIGEST_PREFERENCE",
    "get_cities",
    "get_city_by_name",
    "ensure_profile",
    "get_profile",
    "get_profiles",
    "get_digest_subscribers",
    "update_profile",
    "update_digest_preference",
]
