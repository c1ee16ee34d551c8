import types
from urllib.parse import parse_qs, urlparse

import pytest

from app.routes import auth
from core.spotify import SpotifyError


def _req(cookies=None):
    return types.SimpleNamespace(cookies=cookies or {}, base_url="http://testserver/")


@pytest.fixture
def spotify_ok(monkeypatch):
    calls = {"profiles": [], "sessions": []}
    monkeypatch.setenv("SPOTIFY_REDIRECT_URI", "http://testserver/auth/callback")
    monkeypatch.setenv("INGEST_CITY", "New York City")
    monkeypatch.setattr(
        auth,
        "exchange_code",
        lambda code, redirect_uri: {"access_token": "acc", "refresh_token": "ref", "expires_in": 3600},
    )
    monkeypatch.setattr(
        auth,
        "get_current_user_profile",
        lambda token: {"id": "spotify-robin", "email": "Robin@Example.com", "display_name": "Robin"},
    )
    monkeypatch.setattr(auth, "upsert_spotify_user", lambda **kw: 17)
    monkeypatch.setattr(auth, "get_city_by_name", lambda name: {"id": 3, "name": name})
    monkeypatch.setattr(auth, "ensure_profile", lambda uid, city_id: calls["profiles"].append((uid, city_id)))

    def _create_session(uid):
        calls["sessions"].append(uid)
        return "new-session"

    monkeypatch.setattr(auth, "create_session", _create_session)
    return calls


def test_login_redirects_to_spotify_with_state(monkeypatch):
    monkeypatch.setenv("SPOTIFY_REDIRECT_URI", "http://testserver/auth/callback")
    monkeypatch.setattr(auth, "get_current_user", lambda request: (None, None))

    resp = auth.login(_req())

    assert resp.status_code == 303
    location = urlparse(resp.headers["location"])
    query = parse_qs(location.query)
    assert location.netloc == "accounts.spotify.com"
    assert query["redirect_uri"] == ["http://testserver/auth/callback"]
    assert "user-library-read" in query["scope"][0]
    assert f"{auth.STATE_COOKIE_NAME}={query['state'][0]}" in resp.headers["set-cookie"]


def test_callback_success_creates_profile_and_session(spotify_ok):
    resp = auth.auth_callback(_req({auth.STATE_COOKIE_NAME: "abc"}), code="the-code", state="abc")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/weekly"
    assert spotify_ok["profiles"] == [(17, 3)]
    assert spotify_ok["sessions"] == [17]
    assert "session_id=new-session" in ",".join(resp.headers.getlist("set-cookie"))


@pytest.mark.parametrize(
    "cookies, kwargs",
    [
        ({}, {"code": "c", "state": "abc"}),
        ({auth.STATE_COOKIE_NAME: "abc"}, {"code": "c", "state": "other"}),
        ({auth.STATE_COOKIE_NAME: "abc"}, {"code": None, "state": "abc", "error": "access_denied"}),
    ],
)
def test_callback_rejects_bad_state_or_denied_consent(spotify_ok, cookies, kwargs):
    resp = auth.auth_callback(_req(cookies), **kwargs)

    assert resp.headers["location"] == "/?error=auth_failed"
    assert spotify_ok["sessions"] == []


def test_callback_spotify_failure(monkeypatch, spotify_ok):
    def _fail(code, redirect_uri):
        raise SpotifyError("token_request_failed", status_code=400)

    monkeypatch.setattr(auth, "exchange_code", _fail)

    resp = auth.auth_callback(_req({auth.STATE_COOKIE_NAME: "abc"}), code="c", state="abc")

    assert resp.headers["location"] == "/?error=auth_failed"
    assert spotify_ok["sessions"] == []


def test_logout_clears_session(monkeypatch):
    deleted = []
    monkeypatch.setattr(auth, "get_current_user", lambda request: ({"id": 1}, "tok"))
    monkeypatch.setattr(auth, "delete_session", deleted.append)

    resp = auth.logout(_req())

    assert resp.headers["location"] == "/"
    assert deleted == ["tok"]
