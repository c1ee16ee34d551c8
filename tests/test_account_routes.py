import types

import pytest

from app import security
from app.routes import account


USER = {"id": 5, "display_name": "Robin"}
CITIES = [{"id": 1, "name": "New York City"}, {"id": 2, "name": "Chicago"}]


@pytest.fixture
def settings_env(monkeypatch):
    updates = []
    monkeypatch.setattr(account, "get_current_user", lambda request: (USER, "tok"))
    monkeypatch.setattr(account, "get_cities", lambda: CITIES)
    monkeypatch.setattr(account, "get_profile", lambda uid: {"city_id": 1, "digest_preference": "weekly"})
    monkeypatch.setattr(account, "update_profile", lambda *args: updates.append(args) or True)
    monkeypatch.setattr(account, "match_all", lambda user_id=None, **kw: 0)
    return updates


def _req(csrf="cookie-token"):
    return types.SimpleNamespace(cookies={security.CSRF_COOKIE_NAME: csrf})


def test_settings_save_requires_csrf(settings_env):
    resp = account.settings_save(_req(), city_id=2, digest_preference="daily", csrf_token="wrong")

    assert resp.status_code == 400
    assert settings_env == []


def test_settings_save_rejects_unknown_city_or_preference(settings_env):
    bad_city = account.settings_save(_req(), city_id=99, digest_preference="daily", csrf_token="cookie-token")
    bad_pref = account.settings_save(_req(), city_id=2, digest_preference="hourly", csrf_token="cookie-token")

    assert bad_city.status_code == 400
    assert bad_pref.status_code == 400
    assert settings_env == []


def test_settings_save_updates_profile(settings_env):
    resp = account.settings_save(_req(), city_id=2, digest_preference="daily", csrf_token="cookie-token")

    assert resp.status_code == 200
    assert settings_env == [(5, 2, "daily")]
    assert b"Settings saved." in resp.body


def test_unsubscribe_rejects_bad_token(monkeypatch):
    monkeypatch.setattr(account, "update_digest_preference", lambda *a: pytest.fail("must not update"))

    resp = account.unsubscribe(uid=5, token="forged", digest_preference="none")

    assert resp.status_code == 400


def test_unsubscribe_with_signed_link(monkeypatch):
    changed = []
    monkeypatch.setattr(account, "update_digest_preference", lambda uid, pref: changed.append((uid, pref)) or True)
    token = security.build_unsubscribe_token(5)

    page = account.unsubscribe_form(uid=5, token=token)
    resp = account.unsubscribe(uid=5, token=token, digest_preference="none")

    assert page.status_code == 200
    assert b'value="none" checked' in page.body
    assert resp.status_code == 200
    assert changed == [(5, "none")]


def test_unsubscribe_unknown_preference(monkeypatch):
    def _reject(uid, pref):
        raise ValueError("unknown digest preference")

    monkeypatch.setattr(account, "update_digest_preference", _reject)
    token = security.build_unsubscribe_token(5)

    resp = account.unsubscribe(uid=5, token=token, digest_preference="hourly")

    assert resp.status_code == 400
