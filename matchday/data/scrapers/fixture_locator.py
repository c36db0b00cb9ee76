"""Fixture search on the lazily rendered listing page"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

from matchday.data.scrapers.browser import BrowserSettings, SessionFactory, browser_session, navigate
from matchday.data.variants import SportVariant
from matchday.utils.errors import BlockedError, NavigationError, NotFoundError
from matchday.utils.logging import get_logger

logger = get_logger("scrapers.fixture_locator")

SCROLL_JS = """
([containerSelector, step]) => {
    const container = document.querySelector(containerSelector);
    if (!container) return null;
    container.scrollTop += step;
    return container.scrollTop;
}
"""

HEIGHT_JS = """
(containerSelector) => {
    const container = document.querySelector(containerSelector);
    return container ? container.scrollHeight : 0;
}
"""


@dataclass
class ScrollState:
    """Scroll progress through the listing container"""
    offset: int = 0
    last_height: int = 0
    stagnation_count: int = 0
    iteration: int = 0


def scan_fixture_rows(html: str, variant: SportVariant) -> List[Dict[str, Any]]:
    """Rows currently rendered in the listing, as {"id", "teams"} dicts"""
    soup = BeautifulSoup(html, 'html.parser')
    rows = []
    for item in soup.select(variant.fixture_row):
        label = item.select_one(variant.fixture_teams)
        rows.append({'id': item.get('id'), 'teams': label.get_text() if label is not None else None})
    return rows


def match_fixture_row(rows: List[Dict[str, Any]], search: str) -> Optional[str]:
    """Return the id of the first row whose team labels contain both halves of ``search``.

    The search string is split on its first "-". A row label must split on "-"
    into exactly two parts; each part must contain (not equal) its half.
    """
    home_part, _, away_part = search.partition('-')
    for row in rows:
        label = row.get('teams')
        if not label:
            continue
        teams = [team.strip() for team in label.split('-')]
        if len(teams) != 2:
            continue
        if home_part in teams[0] and away_part in teams[1]:
            return row.get('id')
    return None


class FixtureLocator:
    """Finds a fixture's identifier by scrolling the listing page"""

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        session_factory: SessionFactory = browser_session,
        scroll_step: int = 300,
        scroll_pause_ms: int = 500,
        max_iterations: int = 20,
        page_timeout_ms: int = 60000,
        container_timeout_ms: int = 10000,
    ):
        self.settings = settings or BrowserSettings()
        self.session_factory = session_factory
        self.scroll_step = scroll_step
        self.scroll_pause_ms = scroll_pause_ms
        self.max_iterations = max_iterations
        self.page_timeout_ms = page_timeout_ms
        self.container_timeout_ms = container_timeout_ms

    def locate(self, variant: SportVariant, search: str) -> str:
        """Return the fixture identifier for a "home-away" search string"""
        logger.info(f"Searching {variant.key} listing for {search}")
        with self.session_factory(self.settings) as page:
            navigate(page, variant.listing_url, timeout_ms=self.page_timeout_ms)

            host = urlparse(page.url).hostname or ''
            if not host.endswith(variant.expected_host):
                raise BlockedError(
                    f"Listing redirected to {page.url}, possibly due to anti-bot protection"
                )

            try:
                page.wait_for_selector(variant.list_container, timeout=self.container_timeout_ms)
            except PlaywrightError as e:
                raise NavigationError(
                    f"Listing container {variant.list_container} did not render: {e}"
                ) from e

            fixture_id, state = self.scan(page, variant, search)

        if fixture_id is None:
            logger.info(
                f"No match found for input: {search} (height={state.last_height} "
                f"stagnant={state.stagnation_count})"
            )
            raise NotFoundError(
                f"Match not found: {search} (searched {state.iteration} scroll iterations)"
            )
        logger.info(f"Match found. ID: {fixture_id}")
        return fixture_id

    def scan(self, page, variant: SportVariant, search: str) -> Tuple[Optional[str], ScrollState]:
        """Scroll the listing until ``search`` matches or the iteration cap is reached.

        Returns the fixture id (or None) with the scroll state of this search.
        """
        state = ScrollState()
        while state.iteration < self.max_iterations:
            rows = scan_fixture_rows(page.content(), variant)
            fixture_id = match_fixture_row(rows, search)
            if fixture_id:
                return fixture_id, state

            offset = page.evaluate(SCROLL_JS, [variant.list_container, self.scroll_step])
            if offset is not None:
                state.offset = int(offset)
            page.wait_for_timeout(self.scroll_pause_ms)

            height = int(page.evaluate(HEIGHT_JS, variant.list_container) or 0)
            if height == state.last_height:
                # Lazy content may resume growing, so stagnation alone does not stop the search
                state.stagnation_count += 1
            else:
                state.stagnation_count = 0
            state.last_height = height
            state.iteration += 1
            logger.debug(
                f"Scroll {state.iteration}/{self.max_iterations}: offset={state.offset} "
                f"height={height} stagnant={state.stagnation_count}"
            )
        return None, state
