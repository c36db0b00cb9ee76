from matchday.data.models import Dossier
from matchday.data.variants import SportVariant

COMMENTATOR_SYSTEM_PROMPT = """You are an AI sports prediction model and a renowned sports commentator known for providing insightful, engaging, and data-driven commentary.
Respond ONLY with a JSON object in the exact format requested by the user. No additional text."""

_FOOTBALL_FORMAT = """{
    "homeTeamWinPercentage": number,
    "drawPercentage": number,
    "awayTeamWinPercentage": number,
    "predictedScore": {
        "home": number,
        "away": number
    },
    "predictionConfidence": number,
    "briefComment": "two sentences about the match"
}"""

_BASKETBALL_FORMAT = """{
    "homeTeamWinPercentage": number,
    "awayTeamWinPercentage": number,
    "predictedScore": {
        "home": number,
        "away": number
    },
    "predictionConfidence": number,
    "briefComment": "two sentences about the match"
}"""


def commentary_prompt(dossier: Dossier, variant: SportVariant) -> str:
    """Build the single prompt shared by every commentary provider"""
    weather = dossier.weather
    home_results = "\n".join(dossier.recent_matches.home)
    away_results = "\n".join(dossier.recent_matches.away)
    between_results = "\n".join(dossier.recent_matches.between)

    availability = ""
    if dossier.unavailable_players is not None:
        home_out = ", ".join(dossier.unavailable_players.home) or "None"
        away_out = ", ".join(dossier.unavailable_players.away) or "None"
        availability = (
            f"\n- Unavailable Players {dossier.home_team}: {home_out}"
            f"\n- Unavailable Players {dossier.away_team}: {away_out}"
        )

    if variant.roster_aware:
        response_format = _FOOTBALL_FORMAT
        percentage_rule = "All three percentages (home win, draw, away win) must sum to 100"
    else:
        response_format = _BASKETBALL_FORMAT
        percentage_rule = "Both win percentages must sum to 100"

    return f"""Analyze the provided information and offer a comprehensive preview for the upcoming match.
*Important:* Check league and team names in your database before analyzing the match. Make sure to use the correct names for the league and teams. Also compare according to leagues and team differences and make the analysis accordingly.

Input Data:
- {variant.label}: {dossier.match_key}
- Teams: {dossier.home_team} vs {dossier.away_team}
- Venue: {dossier.venue or "Unknown"}
- Weather: {weather.temperature}°C, {weather.condition}, Humidity: {weather.humidity}%, Wind: {weather.wind_speed} km/h{availability}
- Recent Form {dossier.home_team}:
{home_results}
- Recent Form {dossier.away_team}:
{away_results}
- H2H History:
{between_results}

Analyze the above data and respond ONLY with a JSON object in this exact format:
{response_format}

Requirements:
1. All percentages must be numbers between 0-100
2. {percentage_rule}
3. Brief comment must be two sentences only
4. Prediction confidence should reflect how certain the prediction is (0-100)
5. Consider league level, team quality differences, and weather impact in your calculations
6. Base predictions on recent form, H2H history, and team compositions

Return ONLY the JSON object, no additional text."""


__all__ = ["COMMENTATOR_SYSTEM_PROMPT", "commentary_prompt"]
