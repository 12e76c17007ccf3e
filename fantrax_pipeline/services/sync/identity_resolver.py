"""
Identity resolution for scraped records.

Scrapers identify things by external natural keys (platform league id,
platform team id + season, player display name). Repositories and foreign
keys need internal surrogate ids. This service does the translation.

Matching Strategy:
1. Season: exact platform league id
2. Team: exact (platform team id, season); created only when the caller
   supplies a display name (schedule and standings scrapes carry one)
3. Player: exact normalized full name against the canonical players table
4. MLB team: abbreviation, full name or short name, case-insensitive

Resolved lookups are memoized per instance. Newly created rows are not, since
the enclosing savepoint may still roll them back.
"""
import logging
from typing import Optional, Dict, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from fantrax_pipeline.core.exceptions import UnresolvedReferenceError, ValidationError
from fantrax_pipeline.models import Season, Team, MlbTeam
from fantrax_pipeline.repositories.league import SeasonRepository, TeamRepository
from fantrax_pipeline.repositories.mlb import PlayerRepository
from fantrax_pipeline.services.sync.utils.name_normalizer import normalize_player_name, normalize_team_name

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps external natural keys to internal row ids within one session."""

    def __init__(self, db: Session):
        self.db = db
        self.seasons = SeasonRepository(db)
        self.teams = TeamRepository(db)
        self.players = PlayerRepository(db)
        self._season_ids: Dict[str, int] = {}
        self._team_ids: Dict[Tuple[str, int], int] = {}
        self._player_ids: Dict[str, Optional[int]] = {}
        self._mlb_team_ids: Dict[str, Optional[int]] = {}

    def clear(self) -> None:
        """Forget memoized lookups."""
        self._season_ids.clear()
        self._team_ids.clear()
        self._player_ids.clear()
        self._mlb_team_ids.clear()

    # ========================================================================
    # Fantasy league graph
    # ========================================================================

    def resolve_season(self, league_id: str) -> Season:
        """
        Find the season for a platform league id.

        Raises:
            UnresolvedReferenceError: If no season has that league id
        """
        if not league_id:
            raise ValidationError("League id is required", entity="Season", fields=["league_id"])

        if league_id in self._season_ids:
            return self.db.get(Season, self._season_ids[league_id])

        season = self.seasons.find_by_league_id(league_id)
        if season is None:
            raise UnresolvedReferenceError("Season", {"league_id": league_id})

        self._season_ids[league_id] = season.id
        return season

    def resolve_team(
        self,
        team_id: str,
        season_id: int,
        name: Optional[str] = None,
        icon_url: Optional[str] = None,
        refresh: bool = False
    ) -> Team:
        """
        Find the team for a platform team id within a season.

        If the team does not exist and ``name`` is given, it is created. With
        ``refresh``, an existing team also takes the given name and icon.

        Raises:
            ValidationError: If team_id or season_id is missing
            UnresolvedReferenceError: If the team is unknown and no name was given
        """
        if not team_id or season_id is None:
            raise ValidationError(
                "Team id and season id are required",
                entity="Team",
                fields=[f for f, v in (("team_id", team_id), ("season_id", season_id)) if not v],
            )

        key = (str(team_id), season_id)
        if key in self._team_ids:
            return self.db.get(Team, self._team_ids[key])

        team = self.teams.find_team(str(team_id), season_id)
        if team is not None:
            if refresh and name:
                team = self.teams.upsert_team(str(team_id), season_id, name, icon_url)
            self._team_ids[key] = team.id
            return team

        if not name:
            raise UnresolvedReferenceError("Team", {"team_id": team_id, "season_id": season_id})

        logger.info(f"Creating team {name} ({team_id}) for season {season_id}")
        return self.teams.upsert_team(str(team_id), season_id, name, icon_url)

    # ========================================================================
    # MLB reference data
    # ========================================================================

    def resolve_player_id(self, player_name: str) -> Optional[int]:
        """
        Canonical player id for a display or normalized name, or None.

        Exact normalized match only; the prefix fallback lives in the roster
        matcher because it is a repair pass, not an ingest-time rule.
        """
        normalized = normalize_player_name(player_name)
        if not normalized:
            return None

        if normalized not in self._player_ids:
            player = self.players.find_by_normalized_name(normalized)
            self._player_ids[normalized] = player.id if player else None

        return self._player_ids[normalized]

    def resolve_mlb_team_id(self, name: str) -> Optional[int]:
        """MLB team id by abbreviation, full name or short name, or None."""
        if not name:
            return None

        key = normalize_team_name(name)
        if key not in self._mlb_team_ids:
            lowered = name.strip().lower()
            team = self.db.query(MlbTeam).filter(
                or_(
                    func.lower(MlbTeam.abbreviation) == lowered,
                    func.lower(MlbTeam.name) == lowered,
                    func.lower(MlbTeam.short_name) == lowered,
                )
            ).order_by(MlbTeam.id).first()
            self._mlb_team_ids[key] = team.id if team else None

        return self._mlb_team_ids[key]
