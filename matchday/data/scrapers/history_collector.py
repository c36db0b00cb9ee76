"""Recent form and head-to-head history from the comparison page"""

from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

from matchday.data.models import Extraction
from matchday.data.scrapers.browser import (
    BrowserSettings,
    SessionFactory,
    browser_session,
    navigate,
    network_settled,
)
from matchday.data.variants import HistorySelectors, SportVariant
from matchday.utils.errors import NavigationError
from matchday.utils.logging import get_logger

logger = get_logger("scrapers.history_collector")

CLICK_TAB_JS = """
(selector) => {
    const tab = document.querySelector(selector);
    if (!tab) return false;
    tab.click();
    return true;
}
"""


@dataclass
class HistoryResult:
    """Recent results per side plus the head-to-head block"""
    home: List[str] = field(default_factory=list)
    away: List[str] = field(default_factory=list)
    between: Extraction[List[str]] = field(default_factory=lambda: Extraction.ok([]))


def _cell(row, selector: str) -> str:
    element = row.select_one(selector)
    return element.get_text().strip() if element is not None else ""


def format_history_row(row, selectors: HistorySelectors, half_time_selector: str) -> str:
    """Render one past result as "date: home vs away (FT: score - HT: half)".

    Missing cells render blank, so a malformed row never aborts collection.
    Half-time is the segment after the first colon of the half-time cell.
    """
    date_parts = _cell(row, selectors.date).split()
    date = date_parts[0] if date_parts else ""
    home = _cell(row, selectors.home_label)
    away = _cell(row, selectors.away_label)
    score = _cell(row, selectors.score)
    half_time_parts = _cell(row, half_time_selector).split(':')
    half_time = half_time_parts[1].strip() if len(half_time_parts) > 1 else ""
    return f"{date}: {home} vs {away} (FT: {score} - HT: {half_time})"


def parse_history_rows(html: str, row_selector: str, selectors: HistorySelectors, half_time_selector: str) -> List[str]:
    soup = BeautifulSoup(html, 'html.parser')
    return [format_history_row(row, selectors, half_time_selector) for row in soup.select(row_selector)]


class HistoryCollector:
    """Collects per-side recent form and the last head-to-head meetings"""

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        session_factory: SessionFactory = browser_session,
        settle_idle_ms: int = 500,
        settle_timeout_ms: int = 30000,
    ):
        self.settings = settings or BrowserSettings()
        self.session_factory = session_factory
        self.settle_idle_ms = settle_idle_ms
        self.settle_timeout_ms = settle_timeout_ms

    def collect(self, variant: SportVariant, fixture_id: str) -> HistoryResult:
        """Collect history. Failures reading either side raise; the head-to-head block degrades."""
        selectors = variant.history
        with self.session_factory(self.settings) as page:
            navigate(page, variant.comparison_url(fixture_id))

            try:
                home = self._side_matches(page, selectors, selectors.home_table)
                away = self._side_matches(page, selectors, selectors.away_table)
            except PlaywrightError as e:
                raise NavigationError(f"Failed to read recent matches for {fixture_id}: {e}") from e

            between = self._between_matches(page, selectors, fixture_id)

        logger.info(
            f"Collected history for {fixture_id}: home={len(home)} away={len(away)} "
            f"between={len(between.value or [])}"
        )
        return HistoryResult(home=home, away=away, between=between)

    def _side_matches(self, page, selectors: HistorySelectors, table: str) -> List[str]:
        expand_button = page.query_selector(f"{table} {selectors.expand_button}")
        if expand_button:
            # Expanding lazily loads older rows; reading before the network settles under-counts
            with network_settled(page, idle_ms=self.settle_idle_ms, timeout_ms=self.settle_timeout_ms):
                expand_button.click()
        return parse_history_rows(
            page.content(),
            f"{table} {selectors.row}",
            selectors,
            selectors.side_half_time,
        )

    def _between_matches(self, page, selectors: HistorySelectors, fixture_id: str) -> Extraction[List[str]]:
        try:
            if not page.evaluate(CLICK_TAB_JS, selectors.between_tab):
                logger.warning(f"Head-to-head tab not found for {fixture_id}")
            html = page.content()
        except PlaywrightError as e:
            logger.error(f"Error fetching head-to-head matches for {fixture_id}: {e}")
            return Extraction.failed(f"head-to-head unreadable: {e}")
        return Extraction.ok(
            parse_history_rows(html, selectors.between_rows, selectors, selectors.between_half_time)
        )
