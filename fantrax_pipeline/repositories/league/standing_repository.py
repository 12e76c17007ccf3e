"""
Standing Repository.

One standings row per (season, team). Every upsert replaces the whole row;
values missing from a scrape are written as NULL rather than merged.
"""
from typing import Optional, List

from fantrax_pipeline.models import Standing
from fantrax_pipeline.repositories.base import BaseRepository

STANDING_FIELDS = (
    "rank",
    "wins",
    "losses",
    "ties",
    "win_percentage",
    "division_record",
    "games_back",
    "waiver_position",
    "fantasy_points_for",
    "fantasy_points_against",
    "streak",
)


class StandingRepository(BaseRepository[Standing]):
    """Repository for season standings."""

    def __init__(self, db):
        super().__init__(Standing, db)

    def upsert_standing(self, season_id: int, team_id: int, **stats) -> Standing:
        return self.upsert(
            {"season_id": season_id, "team_id": team_id},
            {name: stats.get(name) for name in STANDING_FIELDS},
        )

    def find_standing(self, season_id: int, team_id: int) -> Optional[Standing]:
        return self.where_first(Standing.season_id == season_id, Standing.team_id == team_id)

    def list_by_season(self, season_id: int) -> List[Standing]:
        """Standings ordered by rank."""
        return self.query().filter(Standing.season_id == season_id).order_by(Standing.rank).all()

    def delete_by_season(self, season_id: int) -> int:
        return self.delete_where(Standing.season_id == season_id)
