"""
Daily stats repository module.

Raw per-player daily lines plus the two derived tables built from them.
"""

from fantrax_pipeline.repositories.stats.player_daily_stat_repository import (
    PlayerDailyStatRepository,
    innings_to_outs,
)
from fantrax_pipeline.repositories.stats.team_daily_stat_repository import TeamDailyStatRepository
from fantrax_pipeline.repositories.stats.matchup_result_repository import MatchupResultRepository

__all__ = [
    "PlayerDailyStatRepository",
    "TeamDailyStatRepository",
    "MatchupResultRepository",
    "innings_to_outs",
]
