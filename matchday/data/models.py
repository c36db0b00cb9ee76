"""Data models for the matchday system"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


def make_match_key(home_team: str, away_team: str) -> str:
    """Build the record key for a fixture. No normalization is applied."""
    return f"{home_team}-{away_team}"


@dataclass
class WeatherData:
    """Current weather at the venue"""
    temperature: float
    condition: str
    humidity: float
    wind_speed: float

    @classmethod
    def default(cls) -> WeatherData:
        """Weather used when the venue cannot be resolved"""
        return cls(temperature=20, condition="Unknown", humidity=50, wind_speed=5)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "condition": self.condition,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
        }


@dataclass
class UnavailablePlayers:
    """Injured and suspended players per side, as "name (status)" strings"""
    home: List[str] = field(default_factory=list)
    away: List[str] = field(default_factory=list)


@dataclass
class RecentMatches:
    """One-line summaries of past results"""
    home: List[str] = field(default_factory=list)
    away: List[str] = field(default_factory=list)
    between: List[str] = field(default_factory=list)


@dataclass
class Dossier:
    """Everything known about a fixture before kickoff"""
    match_key: str
    home_team: str
    away_team: str
    venue: str = ""
    recent_matches: RecentMatches = field(default_factory=RecentMatches)
    weather: WeatherData = field(default_factory=WeatherData.default)
    unavailable_players: Optional[UnavailablePlayers] = None  # Roster-aware sports only

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase shape returned to callers"""
        data: Dict[str, Any] = {
            "matchKey": self.match_key,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "venue": self.venue,
            "recentMatches": {
                "home": list(self.recent_matches.home),
                "away": list(self.recent_matches.away),
                "between": list(self.recent_matches.between),
            },
            "weather": self.weather.to_dict(),
        }
        if self.unavailable_players is not None:
            data["unavailablePlayers"] = {
                "home": list(self.unavailable_players.home),
                "away": list(self.unavailable_players.away),
            }
        return data


@dataclass
class Extraction(Generic[T]):
    """Result of a best-effort sub-extraction.

    ``degraded`` carries the reason when the value could not be obtained; the
    orchestrator then substitutes the field's default.
    """
    value: Optional[T] = None
    degraded: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> Extraction[T]:
        return cls(value=value)

    @classmethod
    def failed(cls, reason: str) -> Extraction[T]:
        return cls(degraded=reason)

    @property
    def is_degraded(self) -> bool:
        return self.degraded is not None
