import asyncio
from datetime import date

import worker.ingest as ingest
from core.database import (
    count_user_artists,
    ensure_profile,
    get_city_by_name,
    get_concerts_by_source_id,
    get_matched_concerts,
    get_upcoming_concerts,
    get_user_artist_names,
    link_user_artists,
    upsert_artists,
    upsert_concerts,
    upsert_spotify_user,
)
from worker.matcher import match_all


SHOW = {
    "artists": ["BlackLips", "Surfbort"],
    "date": "2025-05-01",
    "time": "08:00 PM",
    "venue": "TheBowery",
    "show_url": "https://www.ohmyrockness.com/shows/1",
}


def test_ingesting_twice_keeps_one_row_per_source_id(clean_db, monkeypatch):
    async def _scrape_shows(today=None):
        return [SHOW]

    monkeypatch.setattr(ingest, "scrape_shows", _scrape_shows)

    first = asyncio.run(ingest.run_ingest(today=date(2025, 5, 1)))
    second = asyncio.run(ingest.run_ingest(today=date(2025, 5, 1)))

    assert first["concerts"] == 2
    assert second["concerts"] == 2
    rows = get_concerts_by_source_id("omr:blacklips:thebowery:2025-05-01")
    assert len(rows) == 1
    assert rows[0]["bill"] == ["BlackLips", "Surfbort"]

    city = get_city_by_name("New York City")
    assert len(get_upcoming_concerts(city["id"], "2025-05-01")) == 2


def test_upsert_overwrites_mutable_fields(clean_db):
    city = get_city_by_name("New York City")
    row = ingest.build_concert_rows([SHOW], city["id"])[0]

    upsert_concerts([row])
    upsert_concerts([dict(row, time="09:30 PM")])

    stored = get_concerts_by_source_id(row["source_id"])
    assert len(stored) == 1
    assert stored[0]["time"] == "09:30 PM"


def test_library_and_matching_end_to_end(clean_db):
    city = get_city_by_name("New York City")
    user_id = upsert_spotify_user("sp-1", "fan@example.com", "Fan", "acc", "ref", None)
    ensure_profile(user_id, city["id"])

    ids = upsert_artists(["blacklips", "bodega"])
    assert upsert_artists(["blacklips"]) == ids[:1]
    assert link_user_artists(user_id, ids) == 2
    assert link_user_artists(user_id, ids) == 0
    assert count_user_artists(user_id) == 2
    assert get_user_artist_names(user_id) == {"blacklips", "bodega"}

    upsert_concerts(ingest.build_concert_rows([SHOW], city["id"]))

    assert match_all(today=date(2025, 5, 1)) == 1
    assert match_all(today=date(2025, 5, 1)) == 1
    matched = get_matched_concerts(user_id=user_id, start_date="2025-05-01")
    assert [m["artist_name"] for m in matched] == ["blacklips"]


def test_refresh_token_survives_resign_in_without_one(clean_db):
    from core.database import get_user_by_id

    user_id = upsert_spotify_user("sp-2", "a@example.com", "A", "acc-1", "ref-1", None)
    again = upsert_spotify_user("sp-2", "a@example.com", "A", "acc-2", None, None)

    user = get_user_by_id(user_id)
    assert again == user_id
    assert user["access_token"] == "acc-2"
    assert user["refresh_token"] == "ref-1"
