#!/usr/bin/env python3
"""
Match Roster Players Script

Repair pass for roster slots that were ingested before the canonical players
(or MLB teams) table was loaded, or whose names did not match exactly.

Process:
1. Links unmatched player slots by normalized name (exact, then prefix)
2. With --pitching-staffs, links team-pitching slots to MLB teams

Usage:
    python scripts/match_roster_players.py --league-id abc123xyz
    python scripts/match_roster_players.py --league-id abc123xyz --pitching-staffs
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store
from fantrax_pipeline.core.logging import configure_logging
from fantrax_pipeline.services.matching import RosterMatcher
from fantrax_pipeline.services.sync import IdentityResolver

logger = logging.getLogger(__name__)


def log_summary(label, summary):
    logger.info(f"{label}: processed {summary.processed}, matched {summary.matched}, "
                f"still unmatched {summary.still_unmatched}")
    names = sorted(set(summary.unmatched_names))
    for name in names[:10]:  # Show first 10
        logger.info(f"  - {name}")
    if len(names) > 10:
        logger.info(f"  ... and {len(names) - 10} more")


def main():
    parser = argparse.ArgumentParser(description="Link roster slots to canonical players")
    parser.add_argument("--league-id", required=True, help="Platform league id of the season")
    parser.add_argument("--pitching-staffs", action="store_true", help="Also link team-pitching slots to MLB teams")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON, sql_echo=settings.SQL_ECHO)

    with Store(args.database_url) as store:
        with store.unit_of_work() as uow:
            season = IdentityResolver(uow.session).resolve_season(args.league_id)

        matcher = RosterMatcher(store)
        log_summary("Players", matcher.match_unresolved_players(season.id))

        if args.pitching_staffs:
            log_summary("Pitching staffs", matcher.link_pitching_staffs(season.id))


if __name__ == "__main__":
    main()
