"""
Models for the fantasy league pipeline.

Usage:
    from fantrax_pipeline.models import Season, Team, PlayerDailyStat
"""

from fantrax_pipeline.models.models import (
    Base,
    PeriodType,
    Season,
    Manager,
    Team,
    Matchup,
    Standing,
    SeasonStat,
    HittingStat,
    PitchingStat,
    Player,
    MlbTeam,
    RosterEntry,
    PlayerDailyStat,
    FantasyTeamDailyStat,
    MatchupDailyResult,
    MlbGame,
    BatterGameStat,
)

__all__ = [
    "Base",
    "PeriodType",
    "Season",
    "Manager",
    "Team",
    "Matchup",
    "Standing",
    "SeasonStat",
    "HittingStat",
    "PitchingStat",
    "Player",
    "MlbTeam",
    "RosterEntry",
    "PlayerDailyStat",
    "FantasyTeamDailyStat",
    "MatchupDailyResult",
    "MlbGame",
    "BatterGameStat",
]
