"""Dossier acquisition pipeline: cache check, scrape, enrich, persist"""

from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from matchday.data.models import (
    Dossier,
    Extraction,
    RecentMatches,
    UnavailablePlayers,
    WeatherData,
    make_match_key,
)
from matchday.data.scrapers.browser import BrowserSettings
from matchday.data.scrapers.detail_extractor import DetailExtractor
from matchday.data.scrapers.fixture_locator import FixtureLocator
from matchday.data.scrapers.history_collector import HistoryCollector
from matchday.data.storage import Database, RecordStore
from matchday.data.variants import SportVariant
from matchday.data.weather import WeatherService
from matchday.utils.config import config
from matchday.utils.logging import get_logger, StageLogger, log_data_object

logger = get_logger("orchestration.pipeline")

# Fields allowed to fall back to a default. Anything not listed here is fatal:
# locating the fixture, reading either side's recent form, and persisting.
FIELD_DEFAULTS: Dict[str, Callable[[], Any]] = {
    "venue": str,
    "unavailable_players.home": list,
    "unavailable_players.away": list,
    "recent_matches.between": list,
    "weather": WeatherData.default,
}


class AcquisitionPipeline:
    """Produces a dossier for a fixture, scraping only on a cache miss.

    Two concurrent requests for the same uncached fixture both scrape and both
    upsert; the store resolves them last-write-wins.
    """

    def __init__(
        self,
        db: Database,
        weather_service: WeatherService,
        locator: Optional[FixtureLocator] = None,
        extractor: Optional[DetailExtractor] = None,
        collector: Optional[HistoryCollector] = None,
    ):
        self.db = db
        self.weather_service = weather_service
        self.locator = locator or FixtureLocator()
        self.extractor = extractor or DetailExtractor()
        self.collector = collector or HistoryCollector()
        self.stage_logger = StageLogger(logger)
        self._stores: Dict[str, RecordStore] = {}

    def store_for(self, variant: SportVariant) -> RecordStore:
        if variant.key not in self._stores:
            self._stores[variant.key] = RecordStore(self.db, variant)
        return self._stores[variant.key]

    def acquire(self, variant: SportVariant, home_team: str, away_team: str) -> Dossier:
        """Return the dossier for ``home_team`` vs ``away_team``"""
        match_key = make_match_key(home_team, away_team)
        store = self.store_for(variant)

        cached = store.get(match_key)
        if cached is not None:
            self.stage_logger.log_cache_hit(match_key, variant.key)
            return replace(cached, home_team=home_team, away_team=away_team)

        self.stage_logger.log_stage_start("locate", match_key, variant.key)
        fixture_id = self.locator.locate(variant, match_key)
        self.stage_logger.log_stage_complete("locate", match_key, f"fixture {fixture_id}")

        self.stage_logger.log_stage_start("details", match_key)
        details = self.extractor.extract(variant, fixture_id, home_team, away_team)

        self.stage_logger.log_stage_start("history", match_key)
        history = self.collector.collect(variant, fixture_id)

        venue = self._resolve("venue", details.venue, match_key)

        self.stage_logger.log_stage_start("weather", match_key, venue or "no venue")
        weather = self._resolve("weather", self.weather_service.lookup(venue), match_key)

        unavailable = None
        if variant.roster_aware:
            unavailable = UnavailablePlayers(
                home=self._resolve("unavailable_players.home", details.unavailable_home, match_key),
                away=self._resolve("unavailable_players.away", details.unavailable_away, match_key),
            )

        dossier = Dossier(
            match_key=match_key,
            home_team=home_team,
            away_team=away_team,
            venue=venue,
            recent_matches=RecentMatches(
                home=history.home,
                away=history.away,
                between=self._resolve("recent_matches.between", history.between, match_key),
            ),
            weather=weather,
            unavailable_players=unavailable,
        )

        self.stage_logger.log_stage_start("persist", match_key)
        store.upsert(dossier)
        self.stage_logger.log_stage_complete("persist", match_key)
        log_data_object(logger, f"Dossier {match_key}", dossier)
        return dossier

    def _resolve(self, field_name: str, extraction: Optional[Extraction[Any]], match_key: str) -> Any:
        """Take an extraction's value, or the field's default if it degraded"""
        if extraction is None:
            self.stage_logger.log_degraded(field_name, match_key, "not extracted")
            return FIELD_DEFAULTS[field_name]()
        if extraction.is_degraded:
            self.stage_logger.log_degraded(field_name, match_key, extraction.degraded)
            return FIELD_DEFAULTS[field_name]()
        return extraction.value


def build_pipeline(db: Optional[Database] = None) -> AcquisitionPipeline:
    """Wire a pipeline from configuration"""
    scraping = config.get_scraping_config()
    settings = BrowserSettings(
        headless=scraping.get('headless', True),
        executable_path=config.get_browser_executable_path(),
    )
    return AcquisitionPipeline(
        db=db or Database(),
        weather_service=WeatherService(api_key=config.get_openweather_api_key()),
        locator=FixtureLocator(
            settings=settings,
            scroll_step=scraping.get('scroll_step', 300),
            scroll_pause_ms=scraping.get('scroll_pause_ms', 500),
            max_iterations=scraping.get('max_scroll_iterations', 20),
        ),
        extractor=DetailExtractor(settings=settings),
        collector=HistoryCollector(
            settings=settings,
            settle_idle_ms=scraping.get('settle_idle_ms', 500),
        ),
    )
