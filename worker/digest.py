"""
Digest stage: email each subscriber the upcoming shows that feature their artists.
"""
import logging
import os
from datetime import date, timedelta
from typing import Dict, List, Optional

from app.email_utils import send_email
from app.security import build_unsubscribe_token
from core.database import get_digest_subscribers, get_upcoming_concerts, get_user_artist_names
from core.shows import group_into_shows
from worker.digest_template import build_digest_html, build_digest_text
from worker.matcher import match_concerts

# -------- CONFIG --------
DIGEST_WINDOWS = {"daily": 1, "weekly": 7}
DIGEST_SUBJECTS = {
    "daily": "Tonight in your city",
    "weekly": "Your shows this week",
}
DEFAULT_MODE = "weekly"
# ------------------------

log = logging.getLogger("worker.digest")


def resolve_mode(raw_mode: Optional[str]) -> str:
    """Anything other than 'daily' is the weekly digest."""
    return "daily" if (raw_mode or "").strip().lower() == "daily" else DEFAULT_MODE


def build_unsubscribe_url(user_id: int) -> str:
    base = (os.getenv("PUBLIC_BASE_URL") or "http://localhost:8000").rstrip("/")
    return f"{base}/unsubscribe?uid={user_id}&token={build_unsubscribe_token(user_id)}"


def collect_digest_shows(profile: Dict, start_date: str, end_date: str) -> List[Dict]:
    """
    Shows in [start_date, end_date) in the profile's city featuring an artist from the user's
    current library, grouped per show with match highlighting.
    """
    artist_names = get_user_artist_names(profile["user_id"])
    if not artist_names:
        return []

    concerts = get_upcoming_concerts(profile["city_id"], start_date, end_date)
    matched_ids = set(match_concerts(artist_names, concerts))
    return group_into_shows([c for c in concerts if c["id"] in matched_ids])


def send_digests(mode: str = DEFAULT_MODE, today: Optional[date] = None) -> Dict:
    """
    Send one digest per opted-in user.
    Users without an email, city, artists, or shows in the window are counted as skipped,
    and so are users whose email fails to send.
    Returns {sent, skipped, mode, window_days}.
    """
    mode = resolve_mode(mode)
    window_days = DIGEST_WINDOWS[mode]
    start = today or date.today()
    start_date = start.isoformat()
    end_date = (start + timedelta(days=window_days)).isoformat()

    result = {"sent": 0, "skipped": 0, "mode": mode, "window_days": window_days}

    profiles = get_digest_subscribers(mode)
    if not profiles:
        log.info("No digest subscribers.", extra={"mode": mode})
        return result

    for profile in profiles:
        email = (profile.get("email") or "").strip()
        if not email or "@" not in email or not profile.get("city_id"):
            result["skipped"] += 1
            continue

        shows = collect_digest_shows(profile, start_date, end_date)
        if not shows:
            result["skipped"] += 1
            continue

        unsubscribe_url = build_unsubscribe_url(profile["user_id"])
        try:
            send_email(
                email,
                DIGEST_SUBJECTS[mode],
                build_digest_text(shows, unsubscribe_url),
                build_digest_html(shows, unsubscribe_url),
            )
            result["sent"] += 1
        except Exception as e:
            log.error("Failed to send email", extra={"to": email, "error": str(e)})
            result["skipped"] += 1

    log.info("Digest complete", extra=result)
    return result


__all__ = [
    "DIGEST_WINDOWS",
    "DIGEST_SUBJECTS",
    "resolve_mode",
    "build_unsubscribe_url",
    "collect_digest_shows",
    "send_digests",
]
