"""
Daily aggregation of fantasy team and matchup scores.

The derived tables are never edited directly; they are rebuilt from the raw
per-player rows:

    player_daily_stats --(active rows, split on TmP)--> fantasy_team_daily_stats
    fantasy_team_daily_stats + schedule --> matchup_daily_results

Every method takes an optional ``uow``. Passing the caller's unit of work makes
the recompute part of that transaction (the per-date ingest does this);
otherwise the method runs in its own.
"""
import logging
from datetime import date as date_type
from typing import Dict, Optional, Union

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store, UnitOfWork
from fantrax_pipeline.core.exceptions import TransactionError
from fantrax_pipeline.models import FantasyTeamDailyStat, PlayerDailyStat
from fantrax_pipeline.repositories.league import MatchupRepository
from fantrax_pipeline.repositories.stats import (
    PlayerDailyStatRepository,
    TeamDailyStatRepository,
    MatchupResultRepository,
)

logger = logging.getLogger(__name__)

# team aggregate column -> player daily stat column
HITTING_SUMS = {
    "at_bats": PlayerDailyStat.ab,
    "hits": PlayerDailyStat.h,
    "runs": PlayerDailyStat.r,
    "singles": PlayerDailyStat.singles,
    "doubles": PlayerDailyStat.doubles,
    "triples": PlayerDailyStat.triples,
    "home_runs": PlayerDailyStat.hr,
    "rbis": PlayerDailyStat.rbi,
    "walks": PlayerDailyStat.bb,
    "stolen_bases": PlayerDailyStat.sb,
    "caught_stealing": PlayerDailyStat.cs,
    "hitting_points": PlayerDailyStat.fantasy_points,
}

PITCHING_SUMS = {
    "wins": PlayerDailyStat.wins,
    "innings_pitched_outs": PlayerDailyStat.ip_outs,
    "earned_runs": PlayerDailyStat.earned_runs,
    "hits_plus_walks": PlayerDailyStat.h_plus_bb,
    "strikeouts": PlayerDailyStat.k,
    "pitching_points": PlayerDailyStat.fantasy_points,
}


def as_date(value: Union[str, date_type]) -> date_type:
    """Accept a date or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, date_type):
        return value
    return date_type.fromisoformat(str(value))


class DailyAggregator:
    """Recomputes per-team and per-matchup daily rows from player rows."""

    def __init__(self, store: Store, team_pitching_code: Optional[str] = None):
        self.store = store
        self.team_pitching_code = team_pitching_code or settings.TEAM_PITCHING_CODE

    # ========================================================================
    # Team aggregates
    # ========================================================================

    def recompute_team_daily(
        self,
        date: Union[str, date_type],
        fantasy_team_id: int,
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> FantasyTeamDailyStat:
        """
        Rebuild one team's aggregate for a date.

        Only active rows count. Team-pitching rows feed the pitching counters
        and points; every other row feeds hitting. With no active rows the
        aggregate is all zeros and has no period.
        """
        day = as_date(date)
        with self.store.unit_of_work(uow) as work:
            db = work.session
            active = (
                PlayerDailyStat.date == day,
                PlayerDailyStat.fantasy_team_id == fantasy_team_id,
                PlayerDailyStat.active.is_(True),
            )
            is_team_pitching = PlayerDailyStat.position_played == self.team_pitching_code
            is_hitting = or_(
                PlayerDailyStat.position_played.is_(None),
                PlayerDailyStat.position_played != self.team_pitching_code,
            )

            hitting = self._sum(db, HITTING_SUMS, *active, is_hitting)
            pitching = self._sum(db, PITCHING_SUMS, *active, is_team_pitching)

            period_row = db.query(PlayerDailyStat.period_number).filter(
                *active, PlayerDailyStat.period_number.isnot(None)
            ).first()
            period_number = period_row[0] if period_row else None

            hitting_points = float(hitting.pop("hitting_points"))
            pitching_points = float(pitching.pop("pitching_points"))

            row = TeamDailyStatRepository(db).upsert_daily(
                day,
                fantasy_team_id,
                season_id,
                period_number,
                hitting_points=hitting_points,
                pitching_points=pitching_points,
                **hitting,
                **pitching,
            )
            logger.debug(
                f"Team {fantasy_team_id} on {day}: {hitting_points} hitting + "
                f"{pitching_points} pitching = {row.total_points}"
            )
            return row

    @staticmethod
    def _sum(db, columns: Dict[str, object], *criterion) -> Dict[str, float]:
        labels = list(columns)
        result = db.query(
            *[func.coalesce(func.sum(column), 0).label(label) for label, column in columns.items()]
        ).filter(*criterion).one()
        return dict(zip(labels, result))

    # ========================================================================
    # Matchup results
    # ========================================================================

    def recompute_matchup_results(
        self,
        date: Union[str, date_type],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> int:
        """
        Rebuild the date's score for every matchup in the active period.

        The period comes from the date's player rows. A team with no
        aggregate that day scores 0.

        Returns:
            Number of matchup results written (0 if the date has no rows)
        """
        day = as_date(date)
        with self.store.unit_of_work(uow) as work:
            db = work.session
            period_number = PlayerDailyStatRepository(db).find_period(day, season_id)
            if period_number is None:
                logger.info(f"No player stats for season {season_id} on {day}, no matchups to score")
                return 0

            matchups = MatchupRepository(db).list_by_period(season_id, period_number)
            points = TeamDailyStatRepository(db).points_by_team(day, season_id)
            results = MatchupResultRepository(db)

            for matchup in matchups:
                results.upsert_result(
                    day,
                    matchup.away_team_id,
                    matchup.home_team_id,
                    season_id,
                    period_number,
                    away_points=points.get(matchup.away_team_id, 0.0),
                    home_points=points.get(matchup.home_team_id, 0.0),
                    matchup_id=matchup.matchup_id,
                )

            logger.info(f"Scored {len(matchups)} matchups for period {period_number} on {day}")
            return len(matchups)

    # ========================================================================
    # Whole-day operations
    # ========================================================================

    def replace_day_data(
        self,
        date: Union[str, date_type],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> int:
        """
        Delete all player, team and matchup daily rows for (date, season).

        Run before re-ingesting a date so rows from an earlier scrape cannot
        survive next to the new ones.

        Raises:
            TransactionError: If any delete fails; the unit is rolled back
        """
        day = as_date(date)
        with self.store.unit_of_work(uow) as work:
            db = work.session
            try:
                deleted = MatchupResultRepository(db).delete_by_date(day, season_id)
                deleted += TeamDailyStatRepository(db).delete_by_date(day, season_id)
                deleted += PlayerDailyStatRepository(db).delete_by_date(day, season_id)
            except SQLAlchemyError as e:
                raise TransactionError(f"Could not clear daily stats for {day}: {e}") from e

            logger.info(f"Cleared {deleted} daily rows for season {season_id} on {day}")
            return deleted

    def recompute_day(
        self,
        date: Union[str, date_type],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> Dict[str, int]:
        """
        Rebuild every team aggregate and matchup result for a date.

        Teams that only have a stale aggregate (no player rows any more) are
        rebuilt too, which zeroes them.
        """
        day = as_date(date)
        with self.store.unit_of_work(uow) as work:
            db = work.session
            team_ids = set(PlayerDailyStatRepository(db).team_ids_for_date(day, season_id))
            team_ids.update(
                row.fantasy_team_id
                for row in TeamDailyStatRepository(db).list_by_date(day, season_id)
            )

            for team_id in sorted(team_ids):
                self.recompute_team_daily(day, team_id, season_id, uow=work)

            matchups = self.recompute_matchup_results(day, season_id, uow=work)
            return {"teams": len(team_ids), "matchups": matchups}
