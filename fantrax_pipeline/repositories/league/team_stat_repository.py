"""
Season-long team stat repositories.

Season, hitting and pitching stats share one shape: unique on
(season, team), replaced wholesale on every upsert.
"""
from typing import Optional, List, Tuple, Type

from fantrax_pipeline.models import SeasonStat, HittingStat, PitchingStat
from fantrax_pipeline.repositories.base import BaseRepository, T


class _TeamSeasonStatRepository(BaseRepository[T]):
    """Shared upsert/list/delete for stats keyed by (season, team)."""

    FIELDS: Tuple[str, ...] = ()

    def __init__(self, model_type: Type[T], db):
        super().__init__(model_type, db)

    def upsert_stats(self, season_id: int, team_id: int, **stats) -> T:
        return self.upsert(
            {"season_id": season_id, "team_id": team_id},
            {name: stats.get(name) for name in self.FIELDS},
        )

    def find_stats(self, season_id: int, team_id: int) -> Optional[T]:
        return self.filter_by_first(season_id=season_id, team_id=team_id)

    def list_by_season(self, season_id: int) -> List[T]:
        return self.query().filter_by(season_id=season_id).order_by(self.model_type.team_id).all()

    def delete_by_season(self, season_id: int) -> int:
        return self.delete_where(self.model_type.season_id == season_id)


class SeasonStatRepository(_TeamSeasonStatRepository[SeasonStat]):
    """Fantasy point totals per team."""

    FIELDS = (
        "fantasy_points",
        "adjustments",
        "total_points",
        "fantasy_points_per_game",
        "games_played",
        "hitting_points",
        "team_pitching_points",
        "waiver_position",
        "points_behind_leader",
    )

    def __init__(self, db):
        super().__init__(SeasonStat, db)

    def list_by_season(self, season_id: int) -> List[SeasonStat]:
        """Season stats, highest total first."""
        return self.query().filter_by(season_id=season_id).order_by(SeasonStat.total_points.desc()).all()


class HittingStatRepository(_TeamSeasonStatRepository[HittingStat]):
    """Hitting counting stats per team."""

    FIELDS = (
        "runs",
        "singles",
        "doubles",
        "triples",
        "home_runs",
        "runs_batted_in",
        "walks",
        "stolen_bases",
        "caught_stealing",
    )

    def __init__(self, db):
        super().__init__(HittingStat, db)


class PitchingStatRepository(_TeamSeasonStatRepository[PitchingStat]):
    """Pitching counting stats per team."""

    FIELDS = (
        "wins",
        "innings_pitched",
        "earned_runs",
        "hits_plus_walks",
        "strikeouts",
    )

    def __init__(self, db):
        super().__init__(PitchingStat, db)
