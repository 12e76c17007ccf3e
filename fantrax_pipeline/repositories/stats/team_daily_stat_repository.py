"""
Fantasy team daily stat repository.

Rows here are derived: they are written only by the daily aggregator.
"""
from datetime import date
from typing import Optional, List, Dict

from fantrax_pipeline.models import FantasyTeamDailyStat
from fantrax_pipeline.repositories.base import BaseRepository

TEAM_COUNTER_FIELDS = (
    "at_bats",
    "hits",
    "runs",
    "singles",
    "doubles",
    "triples",
    "home_runs",
    "rbis",
    "walks",
    "stolen_bases",
    "caught_stealing",
    "wins",
    "innings_pitched_outs",
    "earned_runs",
    "hits_plus_walks",
    "strikeouts",
)


class TeamDailyStatRepository(BaseRepository[FantasyTeamDailyStat]):
    """Repository for per-team daily aggregates."""

    def __init__(self, db):
        super().__init__(FantasyTeamDailyStat, db)

    def upsert_daily(
        self,
        date: date,
        fantasy_team_id: int,
        season_id: int,
        period_number: Optional[int],
        hitting_points: float,
        pitching_points: float,
        **counters
    ) -> FantasyTeamDailyStat:
        fields = {name: int(counters.get(name) or 0) for name in TEAM_COUNTER_FIELDS}
        fields.update(
            season_id=season_id,
            period_number=period_number,
            hitting_points=hitting_points,
            pitching_points=pitching_points,
            total_points=hitting_points + pitching_points,
        )
        return self.upsert({"date": date, "fantasy_team_id": fantasy_team_id}, fields)

    def find_daily(self, date: date, fantasy_team_id: int) -> Optional[FantasyTeamDailyStat]:
        return self.filter_by_first(date=date, fantasy_team_id=fantasy_team_id)

    def list_by_date(self, date: date, season_id: int) -> List[FantasyTeamDailyStat]:
        return self.query().filter(
            FantasyTeamDailyStat.date == date,
            FantasyTeamDailyStat.season_id == season_id,
        ).order_by(FantasyTeamDailyStat.total_points.desc()).all()

    def points_by_team(self, date: date, season_id: int) -> Dict[int, float]:
        """Map of fantasy team id to total points for a date."""
        rows = self.db.query(
            FantasyTeamDailyStat.fantasy_team_id,
            FantasyTeamDailyStat.total_points,
        ).filter(
            FantasyTeamDailyStat.date == date,
            FantasyTeamDailyStat.season_id == season_id,
        ).all()
        return {team_id: total for team_id, total in rows}

    def delete_by_date(self, date: date, season_id: int) -> int:
        return self.delete_where(
            FantasyTeamDailyStat.date == date,
            FantasyTeamDailyStat.season_id == season_id,
        )
