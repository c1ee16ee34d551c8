from datetime import date

import worker.matcher as matcher


CONCERTS = [
    {"id": 1, "artist_name": "radiohead", "date": "2025-05-02"},
    {"id": 2, "artist_name": "black lips", "date": "2025-05-03"},
    {"id": 3, "artist_name": "bodega", "date": "2025-05-03"},
]


def test_match_concerts_exact_stored_names():
    assert matcher.match_concerts({"radiohead"}, CONCERTS) == [1]
    assert matcher.match_concerts({"Radiohead"}, CONCERTS) == []
    assert matcher.match_concerts({"black lips", "bodega"}, CONCERTS) == [2, 3]


def test_match_concerts_empty_library():
    assert matcher.match_concerts(set(), CONCERTS) == []


def test_match_all_upserts_per_profile(monkeypatch):
    profiles = [
        {"user_id": 1, "city_id": 10},
        {"user_id": 2, "city_id": 10},
        {"user_id": 3, "city_id": 10},
    ]
    libraries = {1: {"radiohead"}, 2: {"nobody"}, 3: set()}
    upserts = []
    seen_filters = []

    def _get_profiles(city_id=None, user_id=None):
        seen_filters.append((city_id, user_id))
        return profiles

    def _upcoming(city_id, start_date, end_date=None):
        assert start_date == "2025-05-01"
        return CONCERTS

    monkeypatch.setattr(matcher, "get_profiles", _get_profiles)
    monkeypatch.setattr(matcher, "get_user_artist_names", lambda uid: libraries[uid])
    monkeypatch.setattr(matcher, "get_upcoming_concerts", _upcoming)
    monkeypatch.setattr(
        matcher,
        "upsert_matches",
        lambda *, user_id, concert_ids: upserts.append((user_id, list(concert_ids))) or len(concert_ids),
    )

    total = matcher.match_all(city_id=10, today=date(2025, 5, 1))

    assert total == 1
    assert upserts == [(1, [1])]
    assert seen_filters == [(10, None)]


def test_match_all_no_profiles(monkeypatch):
    monkeypatch.setattr(matcher, "get_profiles", lambda city_id=None, user_id=None: [])
    assert matcher.match_all(user_id=4) == 0


def test_match_user_without_city_is_skipped(monkeypatch):
    def _unexpected(uid):
        raise AssertionError("library should not be read without a city")

    monkeypatch.setattr(matcher, "get_user_artist_names", _unexpected)
    assert matcher.match_user({"user_id": 1, "city_id": None}) == 0
