"""
Database models for the fantasy league pipeline.

Every entity carries its natural key as a UniqueConstraint, so a reconciliation
bug shows up as an IntegrityError instead of a silent duplicate row.
"""
import enum
from datetime import datetime

from sqlalchemy import Column, String, Float, Integer, DateTime, Date, ForeignKey, Boolean, Text, Index, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class PeriodType(str, enum.Enum):
    """Kind of scoring period on the fantasy schedule."""
    REGULAR_SEASON = "Regular Season"
    PLAYOFF = "Playoff"
    CHAMPIONSHIP = "Championship"


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================================
# League graph: season -> team -> schedule / standings / season stats
# ============================================================================

class Season(TimestampMixin, Base):
    """One fantasy season, identified by the platform's league id."""
    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(String(10), nullable=False, index=True)
    league_id = Column(String(50), nullable=False)  # Platform league id, immutable
    name = Column(String(255), nullable=True)

    teams = relationship("Team", back_populates="season", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("league_id", name="uq_seasons_league_id"),
    )


class Manager(TimestampMixin, Base):
    """League member; reference data assigned to teams out-of-band."""
    __tablename__ = "managers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    active_from = Column(Integer, nullable=True)  # First season year
    active_until = Column(Integer, nullable=True)  # NULL while still active
    email = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)

    teams = relationship("Team", back_populates="manager")

    __table_args__ = (
        UniqueConstraint("name", name="uq_managers_name"),
    )


class Team(TimestampMixin, Base):
    """A fantasy team within one season."""
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(String(50), nullable=False)  # Platform team id
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    icon_url = Column(Text, nullable=True)
    manager_id = Column(Integer, ForeignKey("managers.id"), nullable=True, index=True)

    season = relationship("Season", back_populates="teams")
    manager = relationship("Manager", back_populates="teams")

    __table_args__ = (
        UniqueConstraint("team_id", "season_id", name="uq_teams_team_season"),
    )


class Matchup(TimestampMixin, Base):
    """Schedule entry. Away/home order is part of the identity."""
    __tablename__ = "schedule"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    period_number = Column(String(20), nullable=False)
    period_type = Column(String(20), nullable=False, default=PeriodType.REGULAR_SEASON.value)
    date_range = Column(String(100), nullable=True)
    away_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    home_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    matchup_id = Column(String(100), nullable=True)  # Platform matchup id

    away_team = relationship("Team", foreign_keys=[away_team_id])
    home_team = relationship("Team", foreign_keys=[home_team_id])

    __table_args__ = (
        UniqueConstraint("season_id", "period_number", "away_team_id", "home_team_id", name="uq_schedule_matchup"),
        Index("ix_schedule_season_period", "season_id", "period_number"),
    )


class Standing(TimestampMixin, Base):
    """Season standings row, replaced wholesale on every scrape."""
    __tablename__ = "standings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    rank = Column(Integer, nullable=True)
    wins = Column(Integer, nullable=True)
    losses = Column(Integer, nullable=True)
    ties = Column(Integer, nullable=True)
    win_percentage = Column(Float, nullable=True)
    division_record = Column(String(20), nullable=True)
    games_back = Column(Float, nullable=True)
    waiver_position = Column(Integer, nullable=True)
    fantasy_points_for = Column(Float, nullable=True)
    fantasy_points_against = Column(Float, nullable=True)
    streak = Column(String(20), nullable=True)

    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("season_id", "team_id", name="uq_standings_season_team"),
    )


class SeasonStat(TimestampMixin, Base):
    """Season-long fantasy point totals for a team."""
    __tablename__ = "season_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    fantasy_points = Column(Float, nullable=True)
    adjustments = Column(Float, nullable=True)
    total_points = Column(Float, nullable=True)
    fantasy_points_per_game = Column(Float, nullable=True)
    games_played = Column(Integer, nullable=True)
    hitting_points = Column(Float, nullable=True)
    team_pitching_points = Column(Float, nullable=True)
    waiver_position = Column(Integer, nullable=True)
    points_behind_leader = Column(Float, nullable=True)

    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("season_id", "team_id", name="uq_season_stats_season_team"),
    )


class HittingStat(TimestampMixin, Base):
    """Season-long hitting counting stats for a team."""
    __tablename__ = "hitting_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    runs = Column(Integer, nullable=True)
    singles = Column(Integer, nullable=True)
    doubles = Column(Integer, nullable=True)
    triples = Column(Integer, nullable=True)
    home_runs = Column(Integer, nullable=True)
    runs_batted_in = Column(Integer, nullable=True)
    walks = Column(Integer, nullable=True)
    stolen_bases = Column(Integer, nullable=True)
    caught_stealing = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("season_id", "team_id", name="uq_hitting_stats_season_team"),
    )


class PitchingStat(TimestampMixin, Base):
    """Season-long pitching counting stats for a team."""
    __tablename__ = "pitching_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    wins = Column(Integer, nullable=True)
    innings_pitched = Column(String(20), nullable=True)  # "1234.2" style
    earned_runs = Column(Integer, nullable=True)
    hits_plus_walks = Column(Integer, nullable=True)
    strikeouts = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("season_id", "team_id", name="uq_pitching_stats_season_team"),
    )


# ============================================================================
# MLB reference data
# ============================================================================

class Player(TimestampMixin, Base):
    """Canonical MLB player. The primary key is the MLB player id."""
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=False)
    full_name = Column(String(255), nullable=False)
    normalized_full_name = Column(String(255), nullable=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    birth_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=True)
    bat_side = Column(String(1), nullable=True)  # L, R, S
    pitch_hand = Column(String(1), nullable=True)  # L, R
    mlb_debut_date = Column(Date, nullable=True)


class MlbTeam(TimestampMixin, Base):
    """MLB club. The primary key is the MLB team id."""
    __tablename__ = "mlb_teams"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, index=True)  # "Los Angeles Dodgers"
    abbreviation = Column(String(10), nullable=True, index=True)  # "LAD"
    short_name = Column(String(100), nullable=True)  # "LA Dodgers"


# ============================================================================
# Rosters
# ============================================================================

class RosterEntry(TimestampMixin, Base):
    """One roster slot of a fantasy team for one scoring period."""
    __tablename__ = "rosters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    period_number = Column(Integer, nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=True)  # NULL until matched
    position_code = Column(String(10), nullable=False)  # C, 1B, ..., UT, TmP, Res, IR
    roster_slot = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    player_name = Column(String(255), nullable=False)
    player_name_normalized = Column(String(255), nullable=True, index=True)
    mlb_team = Column(String(10), nullable=True)
    bat_side = Column(String(1), nullable=True)
    fantrax_player_id = Column(String(50), nullable=True)
    pitching_staff_id = Column(Integer, ForeignKey("mlb_teams.id"), nullable=True)  # TmP slots only

    team = relationship("Team")
    player = relationship("Player")
    pitching_staff = relationship("MlbTeam")

    __table_args__ = (
        UniqueConstraint("season_id", "team_id", "period_number", "position_code", "roster_slot", name="uq_rosters_slot"),
        Index("ix_rosters_lookup", "season_id", "team_id", "period_number"),
        Index("ix_rosters_player", "player_id", "season_id"),
    )


# ============================================================================
# Daily stats (raw detail and derived aggregates)
# ============================================================================

class PlayerDailyStat(TimestampMixin, Base):
    """
    Per-player, per-date line for a fantasy team.

    ``player_id`` is the platform's player id, or ``TmP_<teamId>`` for the
    team-pitching slot.
    """
    __tablename__ = "player_daily_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    player_id = Column(String(50), nullable=False, index=True)
    player_name = Column(String(255), nullable=True)
    mlb_team = Column(String(10), nullable=True)
    fantasy_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    period_number = Column(Integer, nullable=True)
    position_played = Column(String(10), nullable=True)
    active = Column(Boolean, nullable=False, default=False)

    # Hitting
    ab = Column(Integer, nullable=False, default=0)
    h = Column(Integer, nullable=False, default=0)
    r = Column(Integer, nullable=False, default=0)
    singles = Column(Integer, nullable=False, default=0)
    doubles = Column(Integer, nullable=False, default=0)
    triples = Column(Integer, nullable=False, default=0)
    hr = Column(Integer, nullable=False, default=0)
    rbi = Column(Integer, nullable=False, default=0)
    bb = Column(Integer, nullable=False, default=0)
    sb = Column(Integer, nullable=False, default=0)
    cs = Column(Integer, nullable=False, default=0)

    # Pitching
    wins = Column(Integer, nullable=False, default=0)
    innings_pitched = Column(String(10), nullable=True)  # "6.1" is 6 1/3 innings
    ip_outs = Column(Integer, nullable=False, default=0)
    earned_runs = Column(Integer, nullable=False, default=0)
    hits_allowed = Column(Integer, nullable=False, default=0)
    bb_allowed = Column(Integer, nullable=False, default=0)
    h_plus_bb = Column(Integer, nullable=False, default=0)
    k = Column(Integer, nullable=False, default=0)

    fantasy_points = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint("date", "player_id", "fantasy_team_id", name="uq_player_daily_stats"),
        Index("ix_player_daily_stats_season_period", "season_id", "period_number"),
    )


class FantasyTeamDailyStat(TimestampMixin, Base):
    """Per-team, per-date totals. Always recomputed from PlayerDailyStat."""
    __tablename__ = "fantasy_team_daily_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    fantasy_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    period_number = Column(Integer, nullable=True)

    at_bats = Column(Integer, nullable=False, default=0)
    hits = Column(Integer, nullable=False, default=0)
    runs = Column(Integer, nullable=False, default=0)
    singles = Column(Integer, nullable=False, default=0)
    doubles = Column(Integer, nullable=False, default=0)
    triples = Column(Integer, nullable=False, default=0)
    home_runs = Column(Integer, nullable=False, default=0)
    rbis = Column(Integer, nullable=False, default=0)
    walks = Column(Integer, nullable=False, default=0)
    stolen_bases = Column(Integer, nullable=False, default=0)
    caught_stealing = Column(Integer, nullable=False, default=0)

    wins = Column(Integer, nullable=False, default=0)
    innings_pitched_outs = Column(Integer, nullable=False, default=0)
    earned_runs = Column(Integer, nullable=False, default=0)
    hits_plus_walks = Column(Integer, nullable=False, default=0)
    strikeouts = Column(Integer, nullable=False, default=0)

    hitting_points = Column(Float, nullable=False, default=0.0)
    pitching_points = Column(Float, nullable=False, default=0.0)
    total_points = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint("date", "fantasy_team_id", name="uq_fantasy_team_daily_stats"),
        Index("ix_fantasy_team_daily_stats_season_period", "season_id", "period_number"),
    )


class MatchupDailyResult(TimestampMixin, Base):
    """Per-date score of a scheduled matchup. Always recomputed."""
    __tablename__ = "matchup_daily_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    period_number = Column(Integer, nullable=False)
    matchup_id = Column(String(100), nullable=True)
    away_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    home_team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    away_points = Column(Float, nullable=False, default=0.0)
    home_points = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint("date", "away_team_id", "home_team_id", name="uq_matchup_daily_results"),
        Index("ix_matchup_daily_results_period", "season_id", "period_number"),
    )


# ============================================================================
# Official MLB game data
# ============================================================================

class MlbGame(TimestampMixin, Base):
    """MLB game from the public schedule endpoint."""
    __tablename__ = "mlb_games"

    game_pk = Column(Integer, primary_key=True, autoincrement=False)
    season = Column(String(10), nullable=True, index=True)
    official_date = Column(Date, nullable=True, index=True)
    game_type = Column(String(5), nullable=True)  # R, P, S, ...
    abstract_game_state = Column(String(20), nullable=True)  # Preview, Live, Final
    day_night = Column(String(10), nullable=True)
    home_team_id = Column(Integer, nullable=True)
    away_team_id = Column(Integer, nullable=True)
    home_team_score = Column(Integer, nullable=True)
    away_team_score = Column(Integer, nullable=True)
    venue_id = Column(Integer, nullable=True)
    venue_name = Column(String(255), nullable=True)


class BatterGameStat(TimestampMixin, Base):
    """One batter's boxscore line for one game."""
    __tablename__ = "batter_game_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_pk = Column(Integer, ForeignKey("mlb_games.game_pk", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, nullable=False, index=True)
    player_name = Column(String(255), nullable=True)
    team_id = Column(Integer, nullable=False)
    team_name = Column(String(255), nullable=True)

    games_played = Column(Integer, nullable=False, default=0)
    plate_appearances = Column(Integer, nullable=False, default=0)
    at_bats = Column(Integer, nullable=False, default=0)
    runs = Column(Integer, nullable=False, default=0)
    hits = Column(Integer, nullable=False, default=0)
    doubles = Column(Integer, nullable=False, default=0)
    triples = Column(Integer, nullable=False, default=0)
    home_runs = Column(Integer, nullable=False, default=0)
    rbi = Column(Integer, nullable=False, default=0)
    stolen_bases = Column(Integer, nullable=False, default=0)
    caught_stealing = Column(Integer, nullable=False, default=0)
    base_on_balls = Column(Integer, nullable=False, default=0)
    intentional_walks = Column(Integer, nullable=False, default=0)
    strikeouts = Column(Integer, nullable=False, default=0)
    hit_by_pitch = Column(Integer, nullable=False, default=0)
    sac_flies = Column(Integer, nullable=False, default=0)
    sac_bunts = Column(Integer, nullable=False, default=0)
    ground_into_double_play = Column(Integer, nullable=False, default=0)
    ground_into_triple_play = Column(Integer, nullable=False, default=0)
    fly_outs = Column(Integer, nullable=False, default=0)
    ground_outs = Column(Integer, nullable=False, default=0)
    pop_outs = Column(Integer, nullable=False, default=0)
    line_outs = Column(Integer, nullable=False, default=0)
    air_outs = Column(Integer, nullable=False, default=0)
    total_bases = Column(Integer, nullable=False, default=0)
    left_on_base = Column(Integer, nullable=False, default=0)
    batting_summary = Column(String(255), nullable=True)
    avg = Column(String(10), nullable=False, default=".000")
    obp = Column(String(10), nullable=False, default=".000")
    slg = Column(String(10), nullable=False, default=".000")
    ops = Column(String(10), nullable=False, default=".000")
    at_bats_per_home_run = Column(String(10), nullable=False, default="-")
    stolen_base_percentage = Column(String(10), nullable=False, default="-")

    game = relationship("MlbGame")

    __table_args__ = (
        UniqueConstraint("game_pk", "player_id", "team_id", name="uq_batter_game_stats"),
    )
