"""
Batter game stat repository.

One boxscore batting line per (game, player, team).
"""
from typing import Optional, List, Dict, Any

from fantrax_pipeline.models import BatterGameStat
from fantrax_pipeline.repositories.base import BaseRepository

BATTER_COUNTER_FIELDS = (
    "games_played",
    "plate_appearances",
    "at_bats",
    "runs",
    "hits",
    "doubles",
    "triples",
    "home_runs",
    "rbi",
    "stolen_bases",
    "caught_stealing",
    "base_on_balls",
    "intentional_walks",
    "strikeouts",
    "hit_by_pitch",
    "sac_flies",
    "sac_bunts",
    "ground_into_double_play",
    "ground_into_triple_play",
    "fly_outs",
    "ground_outs",
    "pop_outs",
    "line_outs",
    "air_outs",
    "total_bases",
    "left_on_base",
)

BATTER_RATE_DEFAULTS: Dict[str, str] = {
    "avg": ".000",
    "obp": ".000",
    "slg": ".000",
    "ops": ".000",
    "at_bats_per_home_run": "-",
    "stolen_base_percentage": "-",
}


class BatterGameStatRepository(BaseRepository[BatterGameStat]):
    """Repository for per-game batting lines."""

    def __init__(self, db):
        super().__init__(BatterGameStat, db)

    def upsert_stat(
        self,
        game_pk: int,
        player_id: int,
        team_id: int,
        player_name: Optional[str] = None,
        team_name: Optional[str] = None,
        batting_summary: Optional[str] = None,
        **stats: Any
    ) -> BatterGameStat:
        fields: Dict[str, Any] = {
            "player_name": player_name,
            "team_name": team_name,
            "batting_summary": batting_summary,
        }
        for name in BATTER_COUNTER_FIELDS:
            fields[name] = int(stats.get(name) or 0)
        for name, default in BATTER_RATE_DEFAULTS.items():
            fields[name] = stats.get(name) or default
        return self.upsert({"game_pk": game_pk, "player_id": player_id, "team_id": team_id}, fields)

    def list_by_game(self, game_pk: int) -> List[BatterGameStat]:
        return self.query().filter(BatterGameStat.game_pk == game_pk).order_by(
            BatterGameStat.team_id, BatterGameStat.player_name
        ).all()

    def list_by_player(self, player_id: int) -> List[BatterGameStat]:
        return self.query().filter(BatterGameStat.player_id == player_id).order_by(
            BatterGameStat.game_pk.desc()
        ).all()

    def has_stats_for_game(self, game_pk: int) -> bool:
        return self.exists_where(BatterGameStat.game_pk == game_pk)

    def delete_by_game(self, game_pk: int) -> int:
        return self.delete_where(BatterGameStat.game_pk == game_pk)
