"""
Team Repository for fantasy teams.

Teams are keyed by (platform team id, season). Scrapes refresh the name and,
when they have one, the icon URL. ``manager_id`` is only ever written by
``assign_manager``.

Usage:
    repo = TeamRepository(db)
    team = repo.upsert_team("t8k2m", season.id, "Moonshots")
    team = repo.find_team("t8k2m", season.id)
"""
from typing import Optional, List

from fantrax_pipeline.models import Team
from fantrax_pipeline.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for fantasy teams."""

    def __init__(self, db):
        super().__init__(Team, db)

    # ========================================================================
    # Upsert
    # ========================================================================

    def upsert_team(
        self,
        team_id: str,
        season_id: int,
        name: str,
        icon_url: Optional[str] = None
    ) -> Team:
        """
        Insert or refresh a team.

        A missing icon URL keeps the stored one.
        """
        return self.upsert(
            {"team_id": team_id, "season_id": season_id},
            {"name": name, "icon_url": icon_url},
            keep_existing=("icon_url",),
        )

    def assign_manager(self, team: Team, manager_id: Optional[int]) -> Team:
        """Link a team to a manager (manual / semi-automatic assignment)."""
        team.manager_id = manager_id
        self.db.flush()
        return team

    # ========================================================================
    # Lookups
    # ========================================================================

    def find_team(self, team_id: str, season_id: int) -> Optional[Team]:
        """Find a team by platform team id within a season."""
        return self.where_first(Team.team_id == team_id, Team.season_id == season_id)

    def list_by_season(self, season_id: int) -> List[Team]:
        return self.query().filter(Team.season_id == season_id).order_by(Team.name).all()

    def list_by_manager(self, manager_id: int) -> List[Team]:
        return self.query().filter(Team.manager_id == manager_id).order_by(Team.season_id).all()
