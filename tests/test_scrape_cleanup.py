import asyncio
import types
from datetime import date

import pytest
from playwright.async_api import Error as PlaywrightError

import worker.listings_engine as engine


class _FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_context(self, **kwargs):
        async def new_page():
            return self.page

        return types.SimpleNamespace(new_page=new_page)

    async def close(self):
        self.closed = True


class _FakePage:
    def __init__(self, html="", fail_on=None):
        self.html = html
        self.fail_on = fail_on

    async def goto(self, url, **kwargs):
        if self.fail_on == "goto":
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        return types.SimpleNamespace(status=200)

    async def wait_for_selector(self, selector, **kwargs):
        if self.fail_on == "selector":
            raise PlaywrightError("Timeout 15000ms exceeded")

    async def content(self):
        return self.html


def _install_fake_playwright(monkeypatch, browser):
    class _FakePlaywright:
        def __init__(self):
            async def launch(**kwargs):
                return browser

            self.chromium = types.SimpleNamespace(launch=launch)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

    monkeypatch.setattr(engine, "async_playwright", _FakePlaywright)


@pytest.mark.parametrize("fail_on", ["goto", "selector"])
def test_browser_failure_raises_scrape_error_and_closes_browser(monkeypatch, fail_on):
    browser = _FakeBrowser(_FakePage(fail_on=fail_on))
    _install_fake_playwright(monkeypatch, browser)

    with pytest.raises(engine.ScrapeError):
        asyncio.run(engine.scrape_shows(today=date(2025, 5, 1)))

    assert browser.closed is True


def test_scrape_returns_parsed_shows_and_closes_browser(monkeypatch):
    html = """
    <div class="row vevent">
      <div class="bands summary"><a href="/bands/x">Parquet Courts</a></div>
      <span class="value-title" title="2025-05-02T21:00:00"></span>
      <div class="fn org">Elsewhere</div>
    </div>
    """
    browser = _FakeBrowser(_FakePage(html=html))
    _install_fake_playwright(monkeypatch, browser)

    shows = asyncio.run(engine.scrape_shows(today=date(2025, 5, 1)))

    assert browser.closed is True
    assert len(shows) == 1
    assert shows[0]["artists"] == ["Parquet Courts"]
    assert shows[0]["venue"] == "Elsewhere"
    assert shows[0]["time"] == "09:00 PM"
