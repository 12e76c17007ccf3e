#!/usr/bin/env python3
"""
Recompute Daily Stats Script

Rebuilds the derived daily tables (fantasy team aggregates and matchup
results) from the stored player rows, for every date in a range.

Use after fixing player rows by hand or after changing the team-pitching
rules. Raw player rows are never modified.

Usage:
    python scripts/recompute_daily_stats.py --league-id abc123xyz --start 2024-04-01 --end 2024-04-07
    python scripts/recompute_daily_stats.py --league-id abc123xyz --start 2024-04-01
"""
import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store
from fantrax_pipeline.core.exceptions import PipelineError
from fantrax_pipeline.core.logging import configure_logging, run_context
from fantrax_pipeline.services.aggregation import DailyAggregator, as_date
from fantrax_pipeline.services.sync import IdentityResolver

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Rebuild daily team and matchup scores")
    parser.add_argument("--league-id", required=True, help="Platform league id of the season")
    parser.add_argument("--start", required=True, help="First date (YYYY-MM-DD)")
    parser.add_argument("--end", default=None, help="Last date, inclusive (default: --start)")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON, sql_echo=settings.SQL_ECHO)

    start = as_date(args.start)
    end = as_date(args.end) if args.end else start
    if end < start:
        parser.error("--end is before --start")

    with Store(args.database_url) as store:
        with store.unit_of_work() as uow:
            season = IdentityResolver(uow.session).resolve_season(args.league_id)
        aggregator = DailyAggregator(store)

        logger.info(f"Recomputing season {season.year} ({args.league_id}) from {start} to {end}")

        failures = []
        day = start
        while day <= end:
            with run_context():
                try:
                    counts = aggregator.recompute_day(day, season.id)
                    logger.info(f"{day}: {counts['teams']} teams, {counts['matchups']} matchups")
                except PipelineError as e:
                    logger.error(f"{day}: recompute failed: {e}")
                    failures.append(day)
            day += timedelta(days=1)

        logger.info("=" * 60)
        logger.info(f"Dates processed: {(end - start).days + 1}")
        if failures:
            logger.warning(f"Failed dates: {', '.join(d.isoformat() for d in failures)}")
            sys.exit(1)


if __name__ == "__main__":
    main()
