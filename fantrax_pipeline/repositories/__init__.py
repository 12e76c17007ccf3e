"""
Repository layer for data access.

Every repository wraps the natural-key upsert in BaseRepository and never
commits; the caller's unit of work owns the transaction.

Usage:
    from fantrax_pipeline.core.database import Store
    from fantrax_pipeline.repositories import SeasonRepository, TeamRepository

    with Store() as store, store.unit_of_work() as uow:
        season = SeasonRepository(uow.session).upsert_season("2024", "abc123xyz")
        TeamRepository(uow.session).upsert_team("t8k2m", season.id, "Moonshots")
"""

from fantrax_pipeline.repositories.base import BaseRepository

# League graph
from fantrax_pipeline.repositories.league import (
    SeasonRepository,
    ManagerRepository,
    TeamRepository,
    MatchupRepository,
    StandingRepository,
    SeasonStatRepository,
    HittingStatRepository,
    PitchingStatRepository,
    RosterRepository,
)

# Daily stats
from fantrax_pipeline.repositories.stats import (
    PlayerDailyStatRepository,
    TeamDailyStatRepository,
    MatchupResultRepository,
)

# MLB reference data
from fantrax_pipeline.repositories.mlb import (
    PlayerRepository,
    MlbTeamRepository,
    MlbGameRepository,
    BatterGameStatRepository,
)

__all__ = [
    "BaseRepository",
    "SeasonRepository",
    "ManagerRepository",
    "TeamRepository",
    "MatchupRepository",
    "StandingRepository",
    "SeasonStatRepository",
    "HittingStatRepository",
    "PitchingStatRepository",
    "RosterRepository",
    "PlayerDailyStatRepository",
    "TeamDailyStatRepository",
    "MatchupResultRepository",
    "PlayerRepository",
    "MlbTeamRepository",
    "MlbGameRepository",
    "BatterGameStatRepository",
]
