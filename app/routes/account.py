import html
import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import get_current_user
from app.layout import render_page
from app.security import (
    attach_csrf_cookie,
    issue_csrf_token,
    validate_csrf,
    verify_unsubscribe_token,
)
from core.database import (
    DIGEST_PREFERENCES,
    get_cities,
    get_profile,
    update_digest_preference,
    update_profile,
)
from worker.matcher import match_all

router = APIRouter()
log = logging.getLogger("account")

DIGEST_LABELS = {
    "daily": "Every morning, shows happening that day",
    "weekly": "Once a week, the week ahead",
    "none": "No emails",
}


def _digest_radios(current: str) -> str:
    radios = ""
    for pref in DIGEST_PREFERENCES:
        checked = " checked" if pref == current else ""
        radios += f"""
        <label><input type="radio" name="digest_preference" value="{pref}"{checked} /> {DIGEST_LABELS[pref]}</label>
        """
    return radios


def _settings_page(user: dict, csrf_token: str, message: str = "", status_code: int = 200):
    profile = get_profile(user["id"]) or {}
    current_city = profile.get("city_id")
    options = ""
    for city in get_cities():
        selected = " selected" if city["id"] == current_city else ""
        options += f'<option value="{city["id"]}"{selected}>{html.escape(city["name"])}</option>'

    notice = f'<p class="muted">{message}</p>' if message else ""
    body = f"""
    <div class="card">
      {notice}
      <form method="post" action="/settings">
        <label>City</label>
        <select name="city_id">{options}</select>

        <label style="margin-top:1.5rem;"><strong>Email digest</strong></label>
        {_digest_radios(profile.get("digest_preference") or "weekly")}

        <input type="hidden" name="csrf_token" value="{csrf_token}" />
        <button type="submit">Save</button>
      </form>
    </div>
    """
    resp = render_page("Settings - Concert Calendar", body, user=user, status_code=status_code)
    attach_csrf_cookie(resp, csrf_token)
    return resp


@router.get("/settings", response_class=HTMLResponse)
def settings_form(request: Request):
    user, _ = get_current_user(request)
    if not user:
        return RedirectResponse(url="/", status_code=303)
    csrf_token = issue_csrf_token(request.cookies.get("csrf_token"))
    return _settings_page(user, csrf_token)


@router.post("/settings", response_class=HTMLResponse)
def settings_save(
    request: Request,
    city_id: int = Form(...),
    digest_preference: str = Form(...),
    csrf_token: str = Form(""),
):
    user, _ = get_current_user(request)
    if not user:
        return RedirectResponse(url="/", status_code=303)

    fresh_token = issue_csrf_token(request.cookies.get("csrf_token"))
    if not validate_csrf(request, csrf_token):
        return _settings_page(user, fresh_token, "Your form expired. Please try again.", status_code=400)

    if city_id not in {c["id"] for c in get_cities()} or digest_preference not in DIGEST_PREFERENCES:
        return _settings_page(user, fresh_token, "Please choose a city and a digest option.", status_code=400)

    update_profile(user["id"], city_id, digest_preference)
    try:
        match_all(user_id=user["id"])
    except Exception as e:
        log.warning("Post-settings matching failed", extra={"user_id": user["id"], "error": str(e)})
    return _settings_page(user, fresh_token, "Settings saved.")


def _unsubscribe_page(uid: int, token: str, message: str = "", status_code: int = 200):
    radios = ""
    for pref in DIGEST_PREFERENCES:
        checked = " checked" if pref == "none" else ""
        radios += f"""
        <label><input type="radio" name="digest_preference" value="{pref}"{checked} /> {DIGEST_LABELS[pref]}</label>
        """
    notice = f'<p class="muted">{message}</p>' if message else ""
    body = f"""
    <div class="card">
      <h2 style="margin-top:0;font-family:Georgia,serif;font-weight:500;">Email preferences</h2>
      {notice}
      <form method="post" action="/unsubscribe">
        {radios}
        <input type="hidden" name="uid" value="{uid}" />
        <input type="hidden" name="token" value="{html.escape(token)}" />
        <button type="submit">Update</button>
      </form>
    </div>
    """
    return render_page("Email preferences - Concert Calendar", body, status_code=status_code)


def _invalid_link():
    body = '<div class="card"><p class="muted">This link is invalid. Sign in and use Settings instead.</p></div>'
    return render_page("Email preferences - Concert Calendar", body, status_code=400)


@router.get("/unsubscribe", response_class=HTMLResponse)
def unsubscribe_form(uid: int = 0, token: str = ""):
    if not verify_unsubscribe_token(uid, token):
        return _invalid_link()
    return _unsubscribe_page(uid, token)


@router.post("/unsubscribe", response_class=HTMLResponse)
def unsubscribe(
    uid: int = Form(...),
    token: str = Form(...),
    digest_preference: str = Form("none"),
):
    """The signed link stands in for a session, so this form carries no CSRF token."""
    if not verify_unsubscribe_token(uid, token):
        return _invalid_link()

    try:
        updated = update_digest_preference(uid, digest_preference)
    except ValueError:
        return _unsubscribe_page(uid, token, "Please pick one of the options.", status_code=400)

    if not updated:
        return _invalid_link()
    return _unsubscribe_page(uid, token, "Saved. You can change this again any time.")
