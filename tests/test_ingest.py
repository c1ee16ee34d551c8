import asyncio
import time
from datetime import date

import pytest

import worker.ingest as ingest
from worker.listings_engine import ScrapeError


def _show(artists, venue="The Bowery Ballroom", day="2025-05-01", time="08:00 PM"):
    return {
        "artists": artists,
        "date": day,
        "time": time,
        "venue": venue,
        "show_url": "https://www.ohmyrockness.com/shows/1",
    }


def test_build_concert_rows_one_row_per_artist():
    rows = ingest.build_concert_rows([_show(["The Black Lips", "Surfbort"])], city_id=7)

    assert [r["artist_name"] for r in rows] == ["black lips", "surfbort"]
    first = rows[0]
    assert first["source_id"] == "omr:black-lips:the-bowery-ballroom:2025-05-01"
    assert first["show_id"] == "omr:the-bowery-ballroom:2025-05-01"
    assert rows[1]["show_id"] == first["show_id"]
    assert first["bill"] == ["The Black Lips", "Surfbort"]
    assert first["venue"] == "The Bowery Ballroom"
    assert first["ticket_url"] == "https://www.ohmyrockness.com/shows/1"
    assert first["time"] == "08:00 PM"
    assert first["city_id"] == 7


def test_build_concert_rows_source_id_format():
    rows = ingest.build_concert_rows([_show(["BlackLips"], venue="TheBowery")], city_id=1)
    assert rows[0]["source_id"] == "omr:blacklips:thebowery:2025-05-01"


def test_build_concert_rows_dedupes_and_skips_empty_names():
    shows = [
        _show(["The Black Lips", "Black Lips", "   "]),
        _show(["black lips"]),
    ]
    rows = ingest.build_concert_rows(shows, city_id=1)

    assert len(rows) == 1
    assert rows[0]["bill"] == ["The Black Lips", "Black Lips", "   "]


def test_build_concert_rows_truncates_key_parts_and_blanks_time():
    long_artist = "A" * 60
    long_venue = "Venue " * 10
    rows = ingest.build_concert_rows([_show([long_artist], venue=long_venue, time="")], city_id=1)

    _, artist_part, venue_part, day = rows[0]["source_id"].split(":")
    assert len(artist_part) == ingest.ARTIST_KEY_LENGTH
    assert len(venue_part) == ingest.VENUE_KEY_LENGTH
    assert day == "2025-05-01"
    assert rows[0]["time"] is None


def test_build_concert_rows_strips_punctuation_from_keys():
    rows = ingest.build_concert_rows([_show(["Sleater-Kinney!"], venue="Baby's All Right")], city_id=1)
    assert rows[0]["source_id"] == "omr:sleater-kinney:babys-all-right:2025-05-01"


def _patch_pipeline(monkeypatch, shows=None, scrape_error=None, city=None):
    calls = {"upserted": [], "matched": []}

    async def _scrape_shows(today=None):
        if scrape_error:
            raise scrape_error
        return shows or []

    monkeypatch.setattr(ingest, "scrape_shows", _scrape_shows)
    monkeypatch.setattr(
        ingest,
        "get_city_by_name",
        lambda name: city if city is not None else {"id": 3, "name": name},
    )

    def _upsert(rows):
        calls["upserted"].append(rows)
        return len(rows)

    def _match_all(city_id=None, user_id=None, today=None):
        calls["matched"].append(city_id)
        return 4

    monkeypatch.setattr(ingest, "upsert_concerts", _upsert)
    monkeypatch.setattr(ingest, "match_all", _match_all)
    return calls


def test_run_ingest_upserts_then_matches_city(monkeypatch):
    calls = _patch_pipeline(monkeypatch, shows=[_show(["Black Lips", "Surfbort"]), _show(["Bodega"], venue="Elsewhere")])

    result = asyncio.run(ingest.run_ingest(today=date(2025, 5, 1)))

    assert result == {"concerts": 3, "shows": 2, "matches": 4}
    assert len(calls["upserted"]) == 1
    assert calls["matched"] == [3]


def test_run_ingest_no_shows_writes_nothing(monkeypatch):
    calls = _patch_pipeline(monkeypatch, shows=[])

    result = asyncio.run(ingest.run_ingest(today=date(2025, 5, 1)))

    assert result == {"concerts": 0, "shows": 0, "matches": 0}
    assert calls["upserted"] == []
    assert calls["matched"] == []


def test_run_ingest_scrape_error_propagates(monkeypatch):
    calls = _patch_pipeline(monkeypatch, scrape_error=ScrapeError("Timeout"))

    with pytest.raises(ScrapeError):
        asyncio.run(ingest.run_ingest())

    assert calls["upserted"] == []


def test_run_ingest_unknown_city(monkeypatch):
    _patch_pipeline(monkeypatch, shows=[_show(["Bodega"])], city={})
    monkeypatch.setenv("INGEST_CITY", "Atlantis")

    with pytest.raises(ingest.CityNotFoundError):
        asyncio.run(ingest.run_ingest())


def test_venue_spelling_variants_share_one_row():
    shows = [
        _show(["Bodega"], venue="The Bowery!"),
        _show(["Bodega"], venue="the bowery"),
    ]
    rows = ingest.build_concert_rows(shows, city_id=1)

    assert len(rows) == 1
    assert rows[0]["source_id"] == "omr:bodega:the-bowery:2025-05-01"


def test_punctuation_only_artist_is_skipped():
    rows = ingest.build_concert_rows([_show(["???", "Bodega"])], city_id=1)
    assert [r["artist_name"] for r in rows] == ["bodega"]


def test_slow_upsert_does_not_stall_the_event_loop(monkeypatch):
    _patch_pipeline(monkeypatch, shows=[_show(["Bodega"])])

    def _slow_upsert(rows):
        time.sleep(0.5)
        return len(rows)

    monkeypatch.setattr(ingest, "upsert_concerts", _slow_upsert)

    async def _run():
        gaps = []

        async def _ticker():
            last = time.monotonic()
            while True:
                await asyncio.sleep(0.05)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        ticker = asyncio.create_task(_ticker())
        result = await ingest.run_ingest(today=date(2025, 5, 1))
        ticker.cancel()
        return result, gaps

    result, gaps = asyncio.run(_run())

    assert result["concerts"] == 1
    assert len(gaps) >= 5
    assert max(gaps) < 0.2
