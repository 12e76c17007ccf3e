"""
MLB Game Repository.

Games from the public MLB schedule, keyed by ``game_pk``.
"""
from datetime import date
from typing import Optional, List

from fantrax_pipeline.models import MlbGame
from fantrax_pipeline.repositories.base import BaseRepository

GAME_FIELDS = (
    "season",
    "official_date",
    "game_type",
    "abstract_game_state",
    "day_night",
    "home_team_id",
    "away_team_id",
    "home_team_score",
    "away_team_score",
    "venue_id",
    "venue_name",
)


class MlbGameRepository(BaseRepository[MlbGame]):
    """Repository for MLB games."""

    def __init__(self, db):
        super().__init__(MlbGame, db)

    def upsert_game(self, game_pk: int, **fields) -> MlbGame:
        return self.upsert({"game_pk": game_pk}, {name: fields.get(name) for name in GAME_FIELDS})

    def find_by_game_pk(self, game_pk: int) -> Optional[MlbGame]:
        return self.find_by_id(game_pk)

    def list_by_season(self, season: str) -> List[MlbGame]:
        return self.query().filter(MlbGame.season == str(season)).order_by(
            MlbGame.official_date, MlbGame.game_pk
        ).all()

    def list_by_date_range(self, start: date, end: date, season: Optional[str] = None) -> List[MlbGame]:
        """Games with an official date in [start, end]."""
        query = self.query().filter(MlbGame.official_date >= start, MlbGame.official_date <= end)
        if season is not None:
            query = query.filter(MlbGame.season == str(season))
        return query.order_by(MlbGame.official_date, MlbGame.game_pk).all()

    def list_team_games(self, season: str, team_id: int) -> List[MlbGame]:
        return self.query().filter(
            MlbGame.season == str(season),
            (MlbGame.home_team_id == team_id) | (MlbGame.away_team_id == team_id),
        ).order_by(MlbGame.official_date).all()
