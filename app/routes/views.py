import calendar
import html
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from app.auth_utils import get_current_user
from app.layout import render_page
from core.database import count_user_artists, get_matched_concerts, get_profile
from core.shows import group_by_date, group_into_shows
from worker.digest_template import format_date

router = APIRouter()

CALENDAR_MONTHS_AHEAD = 6
WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_month(raw: Optional[str], today: date) -> date:
    """
    Turn ?month=YYYY-MM into the first day of that month, clamped to the calendar's range.
    Missing or malformed values fall back to the current month.
    """
    first = today.replace(day=1)
    last = add_months(today, CALENDAR_MONTHS_AHEAD).replace(day=1)
    try:
        year, month = (int(part) for part in (raw or "").split("-"))
        chosen = date(year, month, 1)
    except ValueError:
        return first
    return min(max(chosen, first), last)


def _render_bill(show: Dict) -> str:
    parts = []
    for entry in show["bill"]:
        css = "match" if entry["is_match"] else "other"
        parts.append(f'<span class="{css}">{html.escape(entry["name"])}</span>')
    return ' <span class="sep">/</span> '.join(parts)


def _render_show_card(show: Dict) -> str:
    details = html.escape(show["venue"])
    if show.get("time"):
        details = f"{html.escape(show['time'])} &middot; {details}"
    tickets = ""
    if show.get("ticket_url"):
        tickets = f'<a class="tickets" href="{html.escape(show["ticket_url"])}" target="_blank" rel="noopener">Tickets</a>'
    return f"""
    <div class="card">
      <p class="bill">{_render_bill(show)}</p>
      <div class="muted">{details}</div>
      {tickets}
    </div>
    """


def _sync_prompt() -> str:
    return """
    <div class="card">
      <h2 style="margin-top:0;font-family:Georgia,serif;font-weight:500;">Bring in your library</h2>
      <p class="muted">We look at the artists behind your liked songs on Spotify and watch the
      listings for them. This takes a few seconds.</p>
      <button id="sync-btn" type="button">Sync my artists</button>
      <p id="sync-status" class="muted"></p>
    </div>
    <script>
      document.getElementById("sync-btn").addEventListener("click", async () => {
        const status = document.getElementById("sync-status");
        status.textContent = "Syncing...";
        const resp = await fetch("/api/sync-artists", {method: "POST"});
        const data = await resp.json();
        if (resp.ok) {
          window.location.reload();
        } else if (data.error === "spotify_token_expired" || data.error === "no_spotify_token") {
          window.location.href = "/login";
        } else {
          status.textContent = "Sync failed, try again in a minute.";
        }
      });
    </script>
    """


@router.get("/", response_class=HTMLResponse)
def index(request: Request, error: Optional[str] = None):
    user, _ = get_current_user(request)
    if user:
        return RedirectResponse(url="/weekly", status_code=303)

    notice = ""
    if error:
        notice = '<p class="muted">Spotify sign-in did not go through. Please try again.</p>'

    body = f"""
    <div class="card" style="text-align:center;padding:2.5rem 1.5rem;">
      <h2 style="font-family:Georgia,serif;font-weight:500;margin-top:0;">Never miss your artists live</h2>
      <p class="muted">Connect Spotify and we'll list upcoming shows in your city by the bands you
      already love, with a weekly email so you hear about them first.</p>
      {notice}
      <a href="/login"><button type="button">Connect Spotify</button></a>
    </div>
    """
    return render_page("Concert Calendar", body)


@router.get("/weekly", response_class=HTMLResponse)
def weekly(request: Request):
    user, _ = get_current_user(request)
    if not user:
        return RedirectResponse(url="/", status_code=303)

    if count_user_artists(user["id"]) == 0:
        return render_page("This week - Concert Calendar", _sync_prompt(), user=user)

    today = date.today()
    rows = get_matched_concerts(user_id=user["id"], start_date=today.isoformat())
    by_date = group_by_date(group_into_shows(rows))

    if not by_date:
        body = '<div class="card"><p class="muted">Nothing this week. Time to rest your ears.</p></div>'
        return render_page("This week - Concert Calendar", body, user=user)

    profile = get_profile(user["id"]) or {}
    city_name = html.escape(profile.get("city_name") or "")

    sections = []
    for day, shows in by_date.items():
        cards = "".join(_render_show_card(show) for show in shows)
        sections.append(f'<div class="date-header">{format_date(day)}</div>{cards}')

    body = f"""
    <p class="muted">Upcoming shows in {city_name} featuring artists from your library.</p>
    {''.join(sections)}
    """
    return render_page("This week - Concert Calendar", body, user=user)


def _render_month_grid(month_start: date, by_date: Dict[str, List[Dict]], today: date) -> str:
    header = "".join(f"<th>{name}</th>" for name in WEEKDAY_HEADERS)
    weeks_html = ""
    for week in calendar.Calendar(firstweekday=6).monthdayscalendar(month_start.year, month_start.month):
        cells = ""
        for day in week:
            if day == 0:
                cells += '<td class="empty"></td>'
                continue
            current = month_start.replace(day=day)
            css = ' class="today"' if current == today else ""
            pills = ""
            for show in by_date.get(current.isoformat(), []):
                names = ", ".join(entry["name"] for entry in show["bill"] if entry["is_match"])
                title = html.escape(f"{names} @ {show['venue']}")
                href = html.escape(show.get("ticket_url") or "#")
                pills += f'<a class="pill" href="{href}" title="{title}">{html.escape(names)}</a>'
            cells += f'<td{css}><div class="day">{day}</div>{pills}</td>'
        weeks_html += f"<tr>{cells}</tr>"
    return f'<table class="calendar"><tr>{header}</tr>{weeks_html}</table>'


@router.get("/monthly", response_class=HTMLResponse)
def monthly(request: Request, month: Optional[str] = None):
    user, _ = get_current_user(request)
    if not user:
        return RedirectResponse(url="/", status_code=303)

    today = date.today()
    horizon = add_months(today, CALENDAR_MONTHS_AHEAD)
    month_start = parse_month(month, today)

    rows = get_matched_concerts(
        user_id=user["id"],
        start_date=today.isoformat(),
        end_date=horizon.isoformat(),
    )
    by_date = group_by_date(group_into_shows(rows))

    prev_month = add_months(month_start, -1)
    next_month = add_months(month_start, 1)
    nav = ""
    if prev_month >= today.replace(day=1):
        nav += f'<a href="/monthly?month={prev_month:%Y-%m}">&larr; {prev_month:%B}</a>'
    nav += f'<strong style="margin:0 1rem;">{month_start:%B %Y}</strong>'
    if next_month <= horizon:
        nav += f'<a href="/monthly?month={next_month:%Y-%m}">{next_month:%B} &rarr;</a>'

    body = f"""
    <div style="text-align:center;margin-bottom:1rem;">{nav}</div>
    {_render_month_grid(month_start, by_date, today)}
    """
    return render_page("Calendar - Concert Calendar", body, user=user)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/favicon.ico")
def favicon():
    return Response(status_code=204)
