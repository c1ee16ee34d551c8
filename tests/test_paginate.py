from core.db import base
from core.db.artists import artist_store


def _fake_pages(sizes):
    calls = []

    def fetch_page(offset, limit):
        calls.append((offset, limit))
        index = len(calls) - 1
        if index >= len(sizes):
            return []
        return [{"name": f"artist-{offset + i}"} for i in range(sizes[index])]

    return fetch_page, calls


def test_paginate_stops_on_short_page():
    fetch_page, calls = _fake_pages([1000, 1000, 400])

    rows = list(base.paginate(fetch_page, page_size=1000))

    assert len(rows) == 2400
    assert calls == [(0, 1000), (1000, 1000), (2000, 1000)]


def test_paginate_exact_multiple_needs_one_empty_page():
    fetch_page, calls = _fake_pages([1000, 1000])

    rows = list(base.paginate(fetch_page, page_size=1000))

    assert len(rows) == 2000
    assert len(calls) == 3


def test_paginate_empty():
    fetch_page, calls = _fake_pages([])
    assert list(base.paginate(fetch_page)) == []
    assert len(calls) == 1


def test_user_artist_names_reads_every_page(monkeypatch):
    fetch_page, calls = _fake_pages([1000, 1000, 400])
    monkeypatch.setattr(
        artist_store,
        "_fetch_user_artist_page",
        lambda user_id, offset, limit: fetch_page(offset, limit),
    )

    names = artist_store.get_user_artist_names(5)

    assert len(names) == 2400
    assert "artist-2399" in names
    assert len(calls) == 3
