"""
Spotify Web API helpers: OAuth code/refresh exchanges and the liked-tracks artist crawl.

Every function accepts an optional httpx.Client so tests can inject a MockTransport.
"""
from __future__ import annotations

import base64
import os
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Dict, Iterator, Optional, Set
from urllib.parse import urlencode

import httpx

from core.normalize import normalize_artist_name

# -------- CONFIG --------
ACCOUNTS_URL = "https://accounts.spotify.com"
API_URL = "https://api.spotify.com/v1"
LIKED_TRACKS_URL = f"{API_URL}/me/tracks?limit=50"
SCOPES = "user-library-read user-read-email"
HTTP_TIMEOUT = 20.0
# ------------------------


class SpotifyError(Exception):
    """A Spotify call failed (non-2xx response or network error)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SpotifyUnauthorized(SpotifyError):
    """Spotify rejected the access token (HTTP 401)."""


class SpotifyTokenExpired(SpotifyError):
    """The stored credentials can no longer be used; the user has to reconnect Spotify."""


@contextmanager
def _http(client: Optional[httpx.Client]) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=HTTP_TIMEOUT) as owned:
        yield owned


def _client_credentials() -> tuple[str, str]:
    client_id = os.getenv("SPOTIFY_CLIENT_ID")
    client_secret = os.getenv("SPOTIFY_CLIENT_SECRET")
    if not (client_id and client_secret):
        raise RuntimeError("Spotify credentials not configured. Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET.")
    return client_id, client_secret


def _basic_auth_header() -> str:
    client_id, client_secret = _client_credentials()
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def expires_at_from(expires_in) -> str | None:
    try:
        seconds = int(expires_in)
    except (TypeError, ValueError):
        return None
    return (datetime.utcnow() + timedelta(seconds=seconds)).isoformat(timespec="seconds")


def build_authorize_url(state: str, redirect_uri: str) -> str:
    client_id, _ = _client_credentials()
    query = urlencode(
        {
            "client_id": client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "scope": SCOPES,
            "state": state,
        }
    )
    return f"{ACCOUNTS_URL}/authorize?{query}"


def _json(res: httpx.Response) -> Dict:
    try:
        return res.json()
    except ValueError as exc:
        # maintenance pages and proxy errors come back as HTML with a 2xx status
        raise SpotifyError("spotify_bad_response", status_code=res.status_code) from exc


def _token_request(data: Dict[str, str], client: Optional[httpx.Client]) -> Dict:
    headers = {
        "Authorization": _basic_auth_header(),
        "Content-Type": "application/x-www-form-urlencoded",
    }
    with _http(client) as http:
        try:
            res = http.post(f"{ACCOUNTS_URL}/api/token", data=data, headers=headers)
        except httpx.HTTPError as exc:
            raise SpotifyError(f"spotify_unreachable: {exc}") from exc

    if res.status_code != 200:
        raise SpotifyError("token_request_failed", status_code=res.status_code)
    payload = _json(res)
    if not payload.get("access_token"):
        raise SpotifyError("token_request_failed", status_code=res.status_code)
    return payload


def exchange_code(code: str, redirect_uri: str, client: Optional[httpx.Client] = None) -> Dict:
    """Trade an authorization code for {access_token, refresh_token, expires_in, ...}."""
    return _token_request(
        {"grant_type": "authorization_code", "code": code, "redirect_uri": redirect_uri},
        client,
    )


def refresh_access_token(refresh_token: str, client: Optional[httpx.Client] = None) -> Dict:
    """Trade the long-lived refresh token for a new access token."""
    return _token_request(
        {"grant_type": "refresh_token", "refresh_token": refresh_token},
        client,
    )


def _get(http: httpx.Client, url: str, access_token: str) -> Dict:
    try:
        res = http.get(url, headers={"Authorization": f"Bearer {access_token}"})
    except httpx.HTTPError as exc:
        raise SpotifyError(f"spotify_unreachable: {exc}") from exc

    if res.status_code == 401:
        raise SpotifyUnauthorized("spotify_unauthorized", status_code=401)
    if res.status_code < 200 or res.status_code >= 300:
        raise SpotifyError(f"spotify_error_{res.status_code}", status_code=res.status_code)
    return _json(res)


def get_current_user_profile(access_token: str, client: Optional[httpx.Client] = None) -> Dict:
    """Return the signed-in account's /me payload (id, email, display_name)."""
    with _http(client) as http:
        return _get(http, f"{API_URL}/me", access_token)


def fetch_all_liked_artists(access_token: str, client: Optional[httpx.Client] = None) -> Set[str]:
    """
    Walk every page of the user's liked tracks and return the normalized artist names.
    Raises SpotifyUnauthorized on 401 and SpotifyError on any other failure.
    """
    artist_names: Set[str] = set()
    url: str | None = LIKED_TRACKS_URL

    with _http(client) as http:
        while url:
            data = _get(http, url, access_token)
            for item in data.get("items") or []:
                track = (item or {}).get("track") or {}
                for artist in track.get("artists") or []:
                    name = (artist or {}).get("name")
                    if name:
                        artist_names.add(normalize_artist_name(name))
            url = data.get("next")

    artist_names.discard("")
    return artist_names


__all__ = [
    "SpotifyError",
    "SpotifyUnauthorized",
    "SpotifyTokenExpired",
    "build_authorize_url",
    "exchange_code",
    "refresh_access_token",
    "expires_at_from",
    "get_current_user_profile",
    "fetch_all_liked_artists",
]
