import logging
import os
import re
from datetime import date, datetime
from typing import Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

# Oh My Rockness: NYC listings, one `.row.vevent` per show.
LISTINGS_URL = "https://www.ohmyrockness.com/shows?all=true"
LISTINGS_ORIGIN = "https://www.ohmyrockness.com"
SHOW_SELECTOR = ".row.vevent"
UNKNOWN_VENUE = "Unknown Venue"

NAVIGATION_TIMEOUT_MS = 30000
SELECTOR_TIMEOUT_MS = 15000
HEADLESS = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() == "true"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

log = logging.getLogger("worker.listings")


class ScrapeError(RuntimeError):
    """Loading the listings page failed; no shows were extracted."""


def _is_performer_link(anchor) -> bool:
    """Performers have no class or `non-profiled`; other classes link to aggregator profiles."""
    classes = anchor.get("class") or []
    return not classes or "non-profiled" in classes


def _format_time(datetime_attr: str) -> str:
    """12-hour wall-clock time of the listing, or "" when there is no usable time."""
    if "T" not in datetime_attr:
        return ""
    try:
        dt = datetime.fromisoformat(datetime_attr)
    except ValueError:
        return ""
    return dt.strftime("%I:%M %p")


def _resolve_url(href: Optional[str], origin: str) -> Optional[str]:
    if not href:
        return None
    if href.startswith("http"):
        return href
    return urljoin(origin, href)


def parse_listing_html(html: str, today: date, origin: str = LISTINGS_ORIGIN) -> List[Dict]:
    """
    Parse the listings page into raw shows:
    {artists, date (YYYY-MM-DD), time ("hh:mm AM/PM" or ""), venue, show_url}

    Rows without performers or a valid date are skipped, as are rows dated before `today`.
    """
    soup = BeautifulSoup(html, "html.parser")
    shows: List[Dict] = []

    for row in soup.select(SHOW_SELECTOR):
        artists = [
            a.get_text(strip=True)
            for a in row.select(".bands.summary a")
            if _is_performer_link(a)
        ]
        artists = [name for name in artists if name]

        title_el = row.select_one(".value-title")
        datetime_attr = (title_el.get("title") if title_el else "") or ""

        if not artists or not datetime_attr:
            continue

        date_part = datetime_attr.split("T")[0]
        if not _ISO_DATE.match(date_part):
            continue
        try:
            show_date = date.fromisoformat(date_part)
        except ValueError:
            continue
        if show_date < today:
            continue

        venue_el = row.select_one(".fn.org")
        venue = (venue_el.get_text(strip=True) if venue_el else "") or UNKNOWN_VENUE

        url_el = row.select_one("a.url")
        href = url_el.get("href") if url_el else None
        if not href:
            first_anchor = row.select_one("a")
            href = first_anchor.get("href") if first_anchor else None

        shows.append(
            {
                "artists": artists,
                "date": date_part,
                "time": _format_time(datetime_attr),
                "venue": venue,
                "show_url": _resolve_url(href, origin),
            }
        )

    return shows


async def fetch_listing_html(url: str = LISTINGS_URL, headless: bool = HEADLESS) -> str:
    """
    Load the listings page in headless Chromium and return its HTML once shows are rendered.
    Any browser failure raises ScrapeError; the browser is closed either way.
    """
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=headless,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                    "--ignore-certificate-errors",
                ],
                timeout=NAVIGATION_TIMEOUT_MS,
            )
            try:
                context = await browser.new_context(
                    user_agent=USER_AGENT,
                    extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
                )
                page = await context.new_page()

                log.info("Loading listings page", extra={"url": url})
                response = await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                log.info("Listings page status", extra={"status": response.status if response else "no-response"})

                await page.wait_for_selector(SHOW_SELECTOR, timeout=SELECTOR_TIMEOUT_MS)
                return await page.content()
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise ScrapeError(str(exc) or "scrape_failed") from exc


async def scrape_shows(today: Optional[date] = None, headless: bool = HEADLESS) -> List[Dict]:
    """
    High-level engine function:
    - Opens the listings page with Playwright
    - Parses every show row
    - Returns upcoming shows only (dated today or later, local time)
    """
    html = await fetch_listing_html(headless=headless)
    shows = parse_listing_html(html, today or date.today())
    log.info("Parsed shows", extra={"count": len(shows), "html_length": len(html)})
    return shows
