"""
Concert ingestion: scraped shows -> one concert row per (artist, show) -> upsert -> match stage.
"""
import asyncio
import logging
import os
import re
from datetime import date
from typing import Dict, List, Optional

from core.database import get_city_by_name, upsert_concerts
from core.normalize import normalize_artist_name
from worker.listings_engine import scrape_shows
from worker.matcher import match_all

# -------- CONFIG --------
SOURCE_PREFIX = "omr"
VENUE_KEY_LENGTH = 30
ARTIST_KEY_LENGTH = 40
DEFAULT_CITY = "New York City"
# ------------------------

log = logging.getLogger("worker.ingest")


class CityNotFoundError(LookupError):
    """The city being ingested is missing from the cities table."""


def _key_part(value: str, max_length: int) -> str:
    """Lowercase, spaces to hyphens, drop anything outside [a-z0-9-], truncate."""
    value = re.sub(r"\s+", "-", value.lower())
    value = re.sub(r"[^a-z0-9-]", "", value)
    return value[:max_length]


def build_concert_rows(shows: List[Dict], city_id: int) -> List[Dict]:
    """
    Expand each show into one row per billed artist.

    source_id = "<prefix>:<artist>:<venue>:<date>" identifies the row across runs and
    show_id = "<prefix>:<venue>:<date>" groups co-billed rows. Keys are truncated, so two
    long names sharing a prefix can collide; the first row per source_id wins.
    """
    seen: Dict[str, Dict] = {}

    for show in shows:
        venue_part = _key_part(show["venue"], VENUE_KEY_LENGTH)
        show_id = f"{SOURCE_PREFIX}:{venue_part}:{show['date']}"

        for raw_artist in show["artists"]:
            artist_name = normalize_artist_name(raw_artist)
            if not artist_name:
                continue

            artist_part = _key_part(artist_name, ARTIST_KEY_LENGTH)
            if not artist_part:
                # punctuation-only names would all share one source_id per show
                continue
            source_id = f"{SOURCE_PREFIX}:{artist_part}:{venue_part}:{show['date']}"
            if source_id in seen:
                continue

            seen[source_id] = {
                "artist_name": artist_name,
                "venue": show["venue"],
                "date": show["date"],
                "time": show.get("time") or None,
                "ticket_url": show.get("show_url"),
                "source_id": source_id,
                "city_id": city_id,
                "bill": list(show["artists"]),
                "show_id": show_id,
            }

    return list(seen.values())


def resolve_ingest_city() -> Dict:
    city_name = os.getenv("INGEST_CITY") or DEFAULT_CITY
    city = get_city_by_name(city_name)
    if not city:
        raise CityNotFoundError(f"city_not_found: {city_name}")
    return city


async def run_ingest(today: Optional[date] = None) -> Dict:
    """
    Do one full ingestion:
    - resolve the listings city
    - scrape upcoming shows (ScrapeError propagates, nothing is written)
    - upsert concert rows
    - hand the city over to the match stage
    Returns {concerts, shows, matches}.
    """
    # Postgres calls run off the event loop so the web app keeps serving during ingest.
    city = await asyncio.to_thread(resolve_ingest_city)
    shows = await scrape_shows(today=today)

    if not shows:
        log.info("No upcoming shows scraped.")
        return {"concerts": 0, "shows": 0, "matches": 0}

    rows = build_concert_rows(shows, city["id"])
    written = await asyncio.to_thread(upsert_concerts, rows)
    log.info("Concerts upserted", extra={"shows": len(shows), "rows": written, "city_id": city["id"]})

    matches = await asyncio.to_thread(match_all, city_id=city["id"], today=today)
    return {"concerts": written, "shows": len(shows), "matches": matches}


__all__ = [
    "SOURCE_PREFIX",
    "VENUE_KEY_LENGTH",
    "ARTIST_KEY_LENGTH",
    "CityNotFoundError",
    "build_concert_rows",
    "resolve_ingest_city",
    "run_ingest",
]
