"""Pytest configuration and shared fixtures"""

import pytest
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

from matchday.data.models import Dossier, RecentMatches, UnavailablePlayers, WeatherData
from matchday.data.scrapers.fixture_locator import HEIGHT_JS, SCROLL_JS
from matchday.data.scrapers.history_collector import CLICK_TAB_JS
from matchday.data.storage import Database
from matchday.orchestration.commentary import CommentaryProvider


class FakeElement:
    """Element handle whose click can swap the page content"""

    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    def click(self):
        self.page.clicks.append(self.selector)
        if self.selector in self.page.on_click:
            self.page.html = self.page.on_click[self.selector]


class FakePage:
    """In-memory stand-in for a Playwright page.

    Selector queries run against the current HTML with BeautifulSoup, so the
    scrapers read the same markup they would read in a real browser.
    """

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        redirects: Optional[Dict[str, str]] = None,
        fail_urls: Iterable[str] = (),
        scroll_html: Optional[List[str]] = None,
        heights: Optional[List[int]] = None,
        on_click: Optional[Dict[str, str]] = None,
        fail_evaluate: Iterable[str] = (),
        fail_query: bool = False,
    ):
        self.pages = pages or {}
        self.redirects = redirects or {}
        self.fail_urls = set(fail_urls)
        self.scroll_html = list(scroll_html or [])
        self.heights = heights
        self.on_click = on_click or {}
        self.fail_evaluate = set(fail_evaluate)
        self.fail_query = fail_query

        self.url = "about:blank"
        self.html = ""
        self.visited: List[str] = []
        self.clicks: List[str] = []
        self.scroll_count = 0
        self.height_reads = 0
        self.content_reads = 0
        self.waits: List[int] = []
        self.listeners: Dict[str, List[Any]] = {}
        self.removed_listeners: List[str] = []

    def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None):
        self.visited.append(url)
        if url in self.fail_urls:
            raise PlaywrightError(f"net::ERR_CONNECTION_REFUSED at {url}")
        self.url = self.redirects.get(url, url)
        self.html = self.pages.get(url, "<html><body></body></html>")

    def content(self) -> str:
        self.content_reads += 1
        return self.html

    def _soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    def wait_for_selector(self, selector: str, timeout: Optional[int] = None):
        if self._soup().select_one(selector) is None:
            raise PlaywrightError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return FakeElement(self, selector)

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        if self.fail_query:
            raise PlaywrightError("Target page, context or browser has been closed")
        if self._soup().select_one(selector) is None:
            return None
        return FakeElement(self, selector)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if script in self.fail_evaluate:
            raise PlaywrightError("Execution context was destroyed")
        if script == SCROLL_JS:
            container, step = arg
            self.scroll_count += 1
            if self.scroll_html:
                self.html = self.scroll_html.pop(0)
            return self.scroll_count * step
        if script == HEIGHT_JS:
            self.height_reads += 1
            if self.heights is None:
                return 1000 + 300 * self.height_reads
            return self.heights[min(self.height_reads, len(self.heights)) - 1]
        if script == CLICK_TAB_JS:
            if self._soup().select_one(arg) is None:
                return False
            self.clicks.append(arg)
            return True
        raise AssertionError(f"Unexpected script: {script}")

    def wait_for_timeout(self, timeout: int):
        self.waits.append(timeout)

    def on(self, event: str, handler):
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler):
        self.listeners[event].remove(handler)
        self.removed_listeners.append(event)


class FakeSessionFactory:
    """Session factory yielding a prepared page and counting open/close"""

    def __init__(self, page: FakePage):
        self.page = page
        self.opened = 0
        self.closed = 0

    @contextmanager
    def __call__(self, settings):
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1


def listing_html(*rows: tuple, container: bool = True) -> str:
    """Listing markup with (fixture id, "Home - Away") rows"""
    items = "".join(
        f'<div class="events-container__item" id="{fixture_id}">'
        f'<div class="event-row-prematch__cells__teams">{teams}</div></div>'
        for fixture_id, teams in rows
    )
    if not container:
        return f"<html><body><div class='captcha'>{items}</div></body></html>"
    return f'<html><body><div class="sportsbookList">{items}</div></body></html>'


def history_row(date: str, home: str, away: str, score: str, half_time: Optional[str], half_time_class: str) -> str:
    half_time_cell = f'<div class="{half_time_class}">{half_time}</div>' if half_time is not None else ""
    return (
        '<div class="team-against-row">'
        f'<div class="team-against-row__date">{date}</div>'
        f'<div class="team-against-row__home"><span>{home}</span></div>'
        f'<div class="icon-score">{score}</div>'
        f'<div class="team-against-row__away"><span>{away}</span></div>'
        f'{half_time_cell}'
        '</div>'
    )


def comparison_html(home_rows: List[str], away_rows: List[str], between_rows: List[str], expandable: bool = False) -> str:
    """Comparison page markup with both side tables and the head-to-head table"""
    button = '<button class="quick-statistics__table__body__row__open-button">Daha fazla</button>'
    extra = button if expandable else ""
    return (
        '<html><body>'
        '<label for="tab1_1">Aralarındaki Maçlar</label>'
        '<div class="quick-statistics">'
        f'<div class="quick-statistics__table"><div class="quick-statistics__table__body">{"".join(home_rows)}{extra}</div></div>'
        f'<div class="quick-statistics__table"><div class="quick-statistics__table__body">{"".join(away_rows)}</div></div>'
        '<div class="quick-statistics__table quick-statistics__table--last-5-match">'
        f'<div class="quick-statistics__table__body">{"".join(between_rows)}</div></div>'
        '</div></body></html>'
    )


@pytest.fixture
def mock_database(tmp_path):
    """Fixture providing a throwaway SQLite database for tests"""
    db_path = tmp_path / "test_matchday.db"
    db = Database(database_url=f"sqlite:///{db_path}")

    yield db

    # Cleanup
    db.close()
    db.engine.dispose()
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def sample_weather():
    """Fixture providing a resolved weather reading"""
    return WeatherData(temperature=14.2, condition="light rain", humidity=81, wind_speed=4.6)


@pytest.fixture
def sample_dossier(sample_weather):
    """Fixture providing a complete football dossier"""
    return Dossier(
        match_key="Galatasaray-Fenerbahçe",
        home_team="Galatasaray",
        away_team="Fenerbahçe",
        venue="RAMS Park",
        recent_matches=RecentMatches(
            home=["12.03.2024: Galatasaray vs Konyaspor (FT: 3 - 1 - HT: 1 - 0)"],
            away=["10.03.2024: Fenerbahçe vs Kasımpaşa (FT: 2 - 2 - HT: 0 - 1)"],
            between=["24.12.2023: Fenerbahçe vs Galatasaray (FT: 0 - 0 - HT: 0 - 0)"],
        ),
        weather=sample_weather,
        unavailable_players=UnavailablePlayers(home=["Icardi (Sakat)"], away=[]),
    )


@pytest.fixture
def sample_basketball_dossier(sample_weather):
    """Fixture providing a basketball dossier (no unavailable players)"""
    return Dossier(
        match_key="Anadolu Efes-Fenerbahçe Beko",
        home_team="Anadolu Efes",
        away_team="Fenerbahçe Beko",
        venue="Sinan Erdem Spor Salonu",
        recent_matches=RecentMatches(
            home=["08.03.2024: Anadolu Efes vs Real Madrid (FT: 88 - 91 - HT: 40 - 47)"],
            away=["07.03.2024: Fenerbahçe Beko vs Olympiakos (FT: 79 - 70 - HT: 35 - 33)"],
            between=[],
        ),
        weather=sample_weather,
    )


@pytest.fixture
def mock_providers():
    """Fixture providing commentary providers that echo their name"""
    def make(name: str) -> CommentaryProvider:
        return CommentaryProvider(name=name, generate=lambda prompt: {"provider": name, "prompt_length": len(prompt)})
    return [make("gemini-2.0-flash"), make("gpt-4o-mini"), make("claude-3-5-haiku-latest")]


# Pytest markers
def pytest_configure(config):
    """Register custom pytest markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a real browser or API keys)"
    )
