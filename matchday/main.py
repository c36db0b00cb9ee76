"""Main entry point for the matchday dossier service"""

import sys
import json
import argparse
import logging
import os
from typing import Any, Dict, Optional

from matchday.data.models import Dossier
from matchday.data.variants import VARIANTS, get_variant
from matchday.orchestration.commentary import CommentaryAggregator, build_providers
from matchday.orchestration.pipeline import AcquisitionPipeline, build_pipeline
from matchday.utils.config import config
from matchday.utils.errors import MatchdayError
from matchday.utils.logging import setup_logging, get_logger

logger = get_logger("main")

MISSING_TEAMS_ERROR = "Missing required fields: homeTeam and awayTeam are required"


def acquire_dossier(
    sport_variant: str,
    home_team: str,
    away_team: str,
    pipeline: Optional[AcquisitionPipeline] = None,
) -> Dossier:
    """Return the dossier for a fixture, scraping it on first request"""
    variant = get_variant(sport_variant)
    pipeline = pipeline or build_pipeline()
    return pipeline.acquire(variant, home_team, away_team)


def handle_match_request(
    sport: str,
    home_team: Optional[str],
    away_team: Optional[str],
    pipeline: AcquisitionPipeline,
    aggregator: Optional[CommentaryAggregator] = None,
) -> Dict[str, Any]:
    """Validate a request, build the dossier and, if an aggregator is given, its commentary.

    Returns a response body with a ``status`` hint for the transport layer.
    """
    if not home_team or not away_team:
        return {"success": False, "error": MISSING_TEAMS_ERROR, "status": 400}

    try:
        variant = get_variant(sport)
    except ValueError as e:
        return {"success": False, "error": str(e), "status": 400}

    try:
        dossier = pipeline.acquire(variant, home_team, away_team)
        if aggregator is None:
            return {"success": True, "dossier": dossier.to_dict(), "status": 200}
        content = aggregator.generate(dossier, variant)
        return {"success": True, "content": content, "status": 200}
    except Exception as e:
        return error_response(e, f"{sport} request {home_team}-{away_team}")


def error_response(error: Exception, context: str) -> Dict[str, Any]:
    """Log a failure and build the 500 response body"""
    if isinstance(error, MatchdayError):
        logger.error(f"Error handling {context}: {error}")
    else:
        logger.error(f"Unexpected error handling {context}: {error}", exc_info=True)
    return {"success": False, "error": str(error) or "Unknown error", "status": 500}


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Matchday fixture dossier and commentary')
    parser.add_argument(
        '--sport',
        choices=sorted(VARIANTS),
        default='football',
        help='Sport variant. Default: football'
    )
    parser.add_argument('--home', required=True, help='Home team name, as shown on the listing')
    parser.add_argument('--away', required=True, help='Away team name, as shown on the listing')
    parser.add_argument(
        '--no-commentary',
        action='store_true',
        help='Only print the dossier; do not call the commentary providers'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode with detailed data logging'
    )
    args = parser.parse_args()

    if args.debug:
        os.environ['DEBUG'] = 'true'
    log_level = 'DEBUG' if args.debug else config.get_log_level()
    root_logger = setup_logging(log_level=log_level, log_file="matchday.log")
    if args.debug:
        root_logger.setLevel(logging.DEBUG)

    pipeline = None
    try:
        pipeline = build_pipeline()
        aggregator = None
        if not args.no_commentary:
            aggregator = CommentaryAggregator(build_providers(config.get_commentary_models()))
        response = handle_match_request(args.sport, args.home, args.away, pipeline, aggregator)
    except Exception as e:
        response = error_response(e, f"{args.sport} request {args.home}-{args.away}")
    finally:
        if pipeline is not None:
            pipeline.db.close()

    status = response.pop("status")
    print(json.dumps(response, indent=2, ensure_ascii=False, default=str))
    if status != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
