"""
League repository module.

Repositories for the season -> team -> schedule/standings/stats/rosters graph.
"""

from fantrax_pipeline.repositories.league.season_repository import SeasonRepository
from fantrax_pipeline.repositories.league.manager_repository import ManagerRepository
from fantrax_pipeline.repositories.league.team_repository import TeamRepository
from fantrax_pipeline.repositories.league.matchup_repository import MatchupRepository
from fantrax_pipeline.repositories.league.standing_repository import StandingRepository
from fantrax_pipeline.repositories.league.team_stat_repository import (
    SeasonStatRepository,
    HittingStatRepository,
    PitchingStatRepository,
)
from fantrax_pipeline.repositories.league.roster_repository import RosterRepository

__all__ = [
    "SeasonRepository",
    "ManagerRepository",
    "TeamRepository",
    "MatchupRepository",
    "StandingRepository",
    "SeasonStatRepository",
    "HittingStatRepository",
    "PitchingStatRepository",
    "RosterRepository",
]
