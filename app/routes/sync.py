import logging

import psycopg
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.auth_utils import get_current_user
from app.security import check_rate_limit
from core.library import sync_user_library
from core.spotify import SpotifyError, SpotifyTokenExpired
from worker.matcher import match_all

router = APIRouter()
log = logging.getLogger("sync")

# Per-user cap on library crawls.
SYNC_LIMIT = 3
SYNC_WINDOW_SECONDS = 60


@router.post("/api/sync-artists")
def sync_artists(request: Request):
    """
    Pull the signed-in user's liked-track artists into the library, then re-run matching
    for that user. A matching failure does not fail the sync.
    """
    user, _ = get_current_user(request)
    if not user:
        return JSONResponse({"error": "unauthorized"}, status_code=401)

    if not user.get("access_token"):
        return JSONResponse({"error": "no_spotify_token"}, status_code=401)

    allowed, retry_after = check_rate_limit(f"sync:{user['id']}", limit=SYNC_LIMIT, window_seconds=SYNC_WINDOW_SECONDS)
    if not allowed:
        return JSONResponse(
            {"error": "rate_limited"},
            status_code=429,
            headers={"Retry-After": str(retry_after)},
        )

    try:
        count = sync_user_library(user)
    except SpotifyTokenExpired:
        return JSONResponse({"error": "spotify_token_expired"}, status_code=401)
    except SpotifyError as e:
        log.error("Spotify sync failed", extra={"user_id": user["id"], "error": str(e)})
        return JSONResponse({"error": str(e)}, status_code=502)
    except psycopg.Error as e:
        log.error("Library store failed", extra={"user_id": user["id"], "error": str(e)})
        return JSONResponse({"error": "storage_error"}, status_code=500)

    try:
        match_all(user_id=user["id"])
    except Exception as e:
        log.warning("Post-sync matching failed", extra={"user_id": user["id"], "error": str(e)})

    return {"count": count}
