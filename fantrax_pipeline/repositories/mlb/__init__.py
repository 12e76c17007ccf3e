"""
MLB repository module.

Official MLB reference data: players, clubs, games and boxscore lines.
"""

from fantrax_pipeline.repositories.mlb.player_repository import PlayerRepository
from fantrax_pipeline.repositories.mlb.mlb_team_repository import MlbTeamRepository
from fantrax_pipeline.repositories.mlb.mlb_game_repository import MlbGameRepository
from fantrax_pipeline.repositories.mlb.batter_game_stat_repository import BatterGameStatRepository

__all__ = [
    "PlayerRepository",
    "MlbTeamRepository",
    "MlbGameRepository",
    "BatterGameStatRepository",
]
