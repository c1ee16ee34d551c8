"""
Spotify library sync: liked-track artists -> artists / user_artists rows.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Set

import httpx

from core.database import link_user_artists, update_spotify_tokens, upsert_artists
from core.spotify import (
    SpotifyError,
    SpotifyTokenExpired,
    SpotifyUnauthorized,
    expires_at_from,
    fetch_all_liked_artists,
    refresh_access_token,
)

log = logging.getLogger("library")


def _refresh_token_once(user: Dict, client: Optional[httpx.Client]) -> str:
    refresh_token = user.get("refresh_token")
    if not refresh_token:
        raise SpotifyTokenExpired("spotify_token_expired", status_code=401)

    try:
        payload = refresh_access_token(refresh_token, client=client)
    except SpotifyError as exc:
        raise SpotifyTokenExpired("spotify_token_expired", status_code=401) from exc

    access_token = payload["access_token"]
    update_spotify_tokens(user["id"], access_token, expires_at_from(payload.get("expires_in")))
    return access_token


def fetch_artists_with_refresh(user: Dict, client: Optional[httpx.Client] = None) -> Set[str]:
    """
    Crawl the user's liked-track artists. A 401 triggers exactly one token refresh followed by
    a full re-crawl; a second 401 (or a failed refresh) raises SpotifyTokenExpired.
    """
    try:
        return fetch_all_liked_artists(user.get("access_token") or "", client=client)
    except SpotifyUnauthorized:
        log.info("Spotify token rejected, refreshing", extra={"user_id": user.get("id")})

    access_token = _refresh_token_once(user, client)
    try:
        return fetch_all_liked_artists(access_token, client=client)
    except SpotifyUnauthorized as exc:
        raise SpotifyTokenExpired("spotify_token_expired", status_code=401) from exc


def sync_user_library(user: Dict, client: Optional[httpx.Client] = None) -> int:
    """
    Store every artist from the user's liked tracks and link them to the user.
    Returns the number of artists in the library (0 is a valid result).
    """
    artist_names = fetch_artists_with_refresh(user, client=client)
    if not artist_names:
        log.info("Library sync found no artists", extra={"user_id": user.get("id")})
        return 0

    artist_ids = upsert_artists(sorted(artist_names))
    inserted = link_user_artists(user["id"], artist_ids)
    log.info(
        "Library synced",
        extra={"user_id": user.get("id"), "artists": len(artist_ids), "new_links": inserted},
    )
    return len(artist_ids)


__all__ = ["fetch_artists_with_refresh", "sync_user_library"]
