"""Venue and injured/suspended list extraction from fixture detail pages"""

from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

from matchday.data.models import Extraction
from matchday.data.scrapers.browser import BrowserSettings, SessionFactory, browser_session, navigate
from matchday.data.variants import SportVariant
from matchday.utils.errors import NavigationError
from matchday.utils.logging import get_logger

logger = get_logger("scrapers.detail_extractor")


@dataclass
class FixtureDetails:
    """Best-effort results from the detail pages"""
    venue: Extraction[str]
    unavailable_home: Optional[Extraction[List[str]]] = None
    unavailable_away: Optional[Extraction[List[str]]] = None


def _text(element) -> str:
    return element.get_text(strip=True) if element is not None else ""


def parse_venue(html: str, variant: SportVariant) -> Optional[str]:
    """Venue from the last entry of the match info list, or None if absent"""
    soup = BeautifulSoup(html, 'html.parser')
    element = soup.select_one(variant.venue)
    if element is None:
        return None
    return element.get_text().strip()


def format_roster_row(name: str, status: str) -> str:
    return f"{name} ({status})"


def parse_unavailable_players(html: str, variant: SportVariant, team: str) -> List[str]:
    """Injured/suspended players listed under the heading that mentions ``team``.

    No heading for the team, or an "all players available" notice, gives an
    empty list.
    """
    soup = BeautifulSoup(html, 'html.parser')
    heading = next(
        (h for h in soup.select(variant.roster_heading) if team in h.get_text()),
        None,
    )
    if heading is None:
        logger.debug(f"No injured/suspended section mentions {team}")
        return []

    body = heading.find_next_sibling()
    if body is None or variant.all_available_message in body.get_text():
        return []
    if variant.roster_table_class not in (body.get('class') or []):
        return []

    return [
        format_roster_row(_text(row.select_one(variant.roster_name)), _text(row.select_one(variant.roster_status)))
        for row in body.select(variant.roster_row)
    ]


class DetailExtractor:
    """Reads the venue and, for roster-aware sports, unavailable players"""

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        session_factory: SessionFactory = browser_session,
    ):
        self.settings = settings or BrowserSettings()
        self.session_factory = session_factory

    def extract(self, variant: SportVariant, fixture_id: str, home_team: str, away_team: str) -> FixtureDetails:
        """Extract fixture details. Page and selector failures degrade, they do not raise."""
        with self.session_factory(self.settings) as page:
            venue = self._extract_venue(page, variant, fixture_id)
            if not variant.roster_aware:
                return FixtureDetails(venue=venue)

            try:
                navigate(page, variant.roster_url(fixture_id))
                html = page.content()
            except (NavigationError, PlaywrightError) as e:
                logger.error(f"Error loading injured/suspended page for {fixture_id}: {e}")
                reason = f"roster page unavailable: {e}"
                return FixtureDetails(
                    venue=venue,
                    unavailable_home=Extraction.failed(reason),
                    unavailable_away=Extraction.failed(reason),
                )

            return FixtureDetails(
                venue=venue,
                unavailable_home=Extraction.ok(parse_unavailable_players(html, variant, home_team)),
                unavailable_away=Extraction.ok(parse_unavailable_players(html, variant, away_team)),
            )

    def _extract_venue(self, page, variant: SportVariant, fixture_id: str) -> Extraction[str]:
        try:
            navigate(page, variant.detail_url(fixture_id))
            html = page.content()
        except (NavigationError, PlaywrightError) as e:
            logger.error(f"Error loading details page for {fixture_id}: {e}")
            return Extraction.failed(f"details page unavailable: {e}")

        venue = parse_venue(html, variant)
        if venue is None:
            logger.warning(f"Venue not found on details page for {fixture_id}")
            return Extraction.failed("venue element missing")
        return Extraction.ok(venue)
