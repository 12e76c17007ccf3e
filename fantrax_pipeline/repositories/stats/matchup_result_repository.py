"""
Matchup daily result repository.

Rows here are derived from two team daily aggregates and the schedule.
"""
from datetime import date
from typing import Optional, List

from fantrax_pipeline.models import MatchupDailyResult
from fantrax_pipeline.repositories.base import BaseRepository


class MatchupResultRepository(BaseRepository[MatchupDailyResult]):
    """Repository for per-date matchup scores."""

    def __init__(self, db):
        super().__init__(MatchupDailyResult, db)

    def upsert_result(
        self,
        date: date,
        away_team_id: int,
        home_team_id: int,
        season_id: int,
        period_number: int,
        away_points: float,
        home_points: float,
        matchup_id: Optional[str] = None
    ) -> MatchupDailyResult:
        return self.upsert(
            {"date": date, "away_team_id": away_team_id, "home_team_id": home_team_id},
            {
                "season_id": season_id,
                "period_number": period_number,
                "matchup_id": matchup_id,
                "away_points": away_points,
                "home_points": home_points,
            },
        )

    def find_result(self, date: date, away_team_id: int, home_team_id: int) -> Optional[MatchupDailyResult]:
        return self.filter_by_first(date=date, away_team_id=away_team_id, home_team_id=home_team_id)

    def list_by_date(self, date: date, season_id: int) -> List[MatchupDailyResult]:
        return self.query().filter(
            MatchupDailyResult.date == date,
            MatchupDailyResult.season_id == season_id,
        ).order_by(MatchupDailyResult.id).all()

    def list_by_period(self, season_id: int, period_number: int) -> List[MatchupDailyResult]:
        return self.query().filter(
            MatchupDailyResult.season_id == season_id,
            MatchupDailyResult.period_number == period_number,
        ).order_by(MatchupDailyResult.date, MatchupDailyResult.id).all()

    def delete_by_date(self, date: date, season_id: int) -> int:
        return self.delete_where(
            MatchupDailyResult.date == date,
            MatchupDailyResult.season_id == season_id,
        )
