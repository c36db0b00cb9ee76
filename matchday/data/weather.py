"""Venue geocoding and current weather lookup"""

from typing import Optional

import requests

from matchday.data.models import Extraction, WeatherData
from matchday.utils.logging import get_logger

logger = get_logger("data.weather")

GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class WeatherService:
    """Resolves a venue name to current weather. Never raises."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 15,
    ):
        """Initialize weather service

        Args:
            api_key: OpenWeatherMap API key
            session: HTTP session (a new one is created if omitted)
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': 'MatchdayDossier/1.0'})

    def lookup(self, venue: str) -> Extraction[WeatherData]:
        """Look up weather for a venue, reporting why it fell back if it did"""
        if not venue:
            return Extraction.failed("no venue")

        try:
            response = self.session.get(
                GEOCODE_URL,
                params={'q': venue, 'format': 'json', 'limit': 1},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
            if not results:
                logger.error(f"Unable to geocode venue: {venue}")
                return Extraction.failed(f"venue not geocoded: {venue}")

            lat = results[0].get('lat')
            lon = results[0].get('lon')
            if not lat or not lon:
                logger.error(f"Unable to determine coordinates for venue: {venue}")
                return Extraction.failed(f"no coordinates for venue: {venue}")

            response = self.session.get(
                WEATHER_URL,
                params={'lat': lat, 'lon': lon, 'appid': self.api_key, 'units': 'metric'},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

            return Extraction.ok(WeatherData(
                temperature=data['main']['temp'],
                condition=data['weather'][0]['description'],
                humidity=data['main']['humidity'],
                wind_speed=data['wind']['speed'],
            ))
        except Exception as e:
            logger.error(f"Error fetching weather data for {venue}: {e}")
            return Extraction.failed(f"weather lookup failed: {e}")

    def get_weather_data(self, venue: str) -> WeatherData:
        """Current weather for a venue, or the default when it cannot be determined"""
        result = self.lookup(venue)
        if result.is_degraded:
            return WeatherData.default()
        return result.value
