"""
Match stage: link each user to the upcoming concerts of artists in their library.

Every run recomputes from scratch and relies on the (user, concert) upsert being idempotent.
"""
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from core.database import get_profiles, get_upcoming_concerts, get_user_artist_names, upsert_matches

log = logging.getLogger("worker.matcher")


def match_concerts(artist_names: Set[str], concerts: Iterable[Dict]) -> List[int]:
    """
    Return ids of concerts whose stored artist_name is in the user's artist set.
    Stored names are already normalized at ingestion, so this is an exact lookup.
    """
    if not artist_names:
        return []
    return [c["id"] for c in concerts if c.get("artist_name") in artist_names]


def match_user(profile: Dict, today: Optional[date] = None) -> int:
    """Match one profile against its city's upcoming concerts. Returns the number of matched rows."""
    user_id = profile["user_id"]
    city_id = profile.get("city_id")
    if not city_id:
        return 0

    artist_names = get_user_artist_names(user_id)
    if not artist_names:
        return 0

    start = (today or date.today()).isoformat()
    concerts = get_upcoming_concerts(city_id, start)
    if not concerts:
        return 0

    concert_ids = match_concerts(artist_names, concerts)
    if not concert_ids:
        return 0

    return upsert_matches(user_id=user_id, concert_ids=concert_ids)


def match_all(
    city_id: Optional[int] = None,
    user_id: Optional[int] = None,
    today: Optional[date] = None,
) -> int:
    """
    Match every profile with a city set (optionally one city's or one user's).
    Returns the total number of matched concert rows.
    """
    profiles = get_profiles(city_id=city_id, user_id=user_id)
    if not profiles:
        log.info("No profiles to match.", extra={"city_id": city_id, "user_id": user_id})
        return 0

    total = 0
    for profile in profiles:
        total += match_user(profile, today=today)

    log.info("Matching complete", extra={"profiles": len(profiles), "matches": total})
    return total


__all__ = ["match_concerts", "match_user", "match_all"]
