"""
Matchup Repository for the fantasy schedule.

A matchup is keyed by (season, period, away team, home team). Away/home order
is part of the key: (A, B) and (B, A) in the same period are different rows.
"""
from typing import Optional, List

from sqlalchemy import case, cast, func, Integer

from fantrax_pipeline.models import Matchup, PeriodType
from fantrax_pipeline.repositories.base import BaseRepository

PLAYOFF_PERIOD_PREFIX = "Playoff-"


class MatchupRepository(BaseRepository[Matchup]):
    """Repository for schedule entries."""

    def __init__(self, db):
        super().__init__(Matchup, db)

    def upsert_matchup(
        self,
        season_id: int,
        period_number: str,
        away_team_id: int,
        home_team_id: int,
        period_type: str = PeriodType.REGULAR_SEASON.value,
        date_range: Optional[str] = None,
        matchup_id: Optional[str] = None
    ) -> Matchup:
        """
        Insert or refresh a matchup.

        A missing date range or platform matchup id keeps the stored value.
        """
        return self.upsert(
            {
                "season_id": season_id,
                "period_number": str(period_number) if period_number is not None else None,
                "away_team_id": away_team_id,
                "home_team_id": home_team_id,
            },
            {
                "period_type": period_type,
                "date_range": date_range,
                "matchup_id": matchup_id,
            },
            keep_existing=("date_range", "matchup_id"),
        )

    def find_matchup(
        self,
        season_id: int,
        period_number: str,
        away_team_id: int,
        home_team_id: int
    ) -> Optional[Matchup]:
        return self.where_first(
            Matchup.season_id == season_id,
            Matchup.period_number == str(period_number),
            Matchup.away_team_id == away_team_id,
            Matchup.home_team_id == home_team_id,
        )

    def list_by_period(self, season_id: int, period_number) -> List[Matchup]:
        """All matchups scheduled for one scoring period."""
        return self.query().filter(
            Matchup.season_id == season_id,
            Matchup.period_number == str(period_number),
        ).order_by(Matchup.id).all()

    def list_by_season(self, season_id: int) -> List[Matchup]:
        """
        Full season schedule.

        Regular-season periods come first, then playoff periods, each group
        ordered numerically ("Playoff-2" sorts by 2).
        """
        is_playoff = case((Matchup.period_type == PeriodType.REGULAR_SEASON.value, 0), else_=1)
        period_order = case(
            (
                func.substr(Matchup.period_number, 1, len(PLAYOFF_PERIOD_PREFIX)) == PLAYOFF_PERIOD_PREFIX,
                cast(func.substr(Matchup.period_number, len(PLAYOFF_PERIOD_PREFIX) + 1), Integer),
            ),
            else_=cast(Matchup.period_number, Integer),
        )
        return self.query().filter(Matchup.season_id == season_id).order_by(
            is_playoff, period_order, Matchup.id
        ).all()

    def find_team_matchup(self, season_id: int, period_number, team_id: int) -> Optional[Matchup]:
        """The matchup a team plays in for a period, on either side."""
        return self.query().filter(
            Matchup.season_id == season_id,
            Matchup.period_number == str(period_number),
            (Matchup.away_team_id == team_id) | (Matchup.home_team_id == team_id),
        ).first()

    def delete_by_season(self, season_id: int) -> int:
        return self.delete_where(Matchup.season_id == season_id)
