"""
Roster Repository.

A roster entry is one slot of a fantasy team in one scoring period, keyed by
(season, team, period, position code, roster slot). Once a slot is linked to
a canonical player (or, for team pitching, to an MLB team) a later scrape
never clears that link; only deleting the row does.
"""
from typing import Optional, List

from fantrax_pipeline.models import RosterEntry
from fantrax_pipeline.repositories.base import BaseRepository


class RosterRepository(BaseRepository[RosterEntry]):
    """Repository for roster slots."""

    def __init__(self, db):
        super().__init__(RosterEntry, db)

    # ========================================================================
    # Upsert
    # ========================================================================

    def upsert_entry(
        self,
        season_id: int,
        team_id: int,
        period_number: int,
        position_code: str,
        roster_slot: int,
        player_name: str,
        is_active: bool = False,
        player_name_normalized: Optional[str] = None,
        player_id: Optional[int] = None,
        mlb_team: Optional[str] = None,
        bat_side: Optional[str] = None,
        fantrax_player_id: Optional[str] = None,
        pitching_staff_id: Optional[int] = None
    ) -> RosterEntry:
        return self.upsert(
            {
                "season_id": season_id,
                "team_id": team_id,
                "period_number": period_number,
                "position_code": position_code,
                "roster_slot": roster_slot,
            },
            {
                "player_name": player_name,
                "is_active": bool(is_active),
                "player_name_normalized": player_name_normalized,
                "player_id": player_id,
                "mlb_team": mlb_team,
                "bat_side": bat_side,
                "fantrax_player_id": fantrax_player_id,
                "pitching_staff_id": pitching_staff_id,
            },
            keep_existing=("player_id", "pitching_staff_id"),
        )

    # ========================================================================
    # Lookups
    # ========================================================================

    def find_entry(
        self,
        season_id: int,
        team_id: int,
        period_number: int,
        position_code: str,
        roster_slot: int
    ) -> Optional[RosterEntry]:
        return self.filter_by_first(
            season_id=season_id,
            team_id=team_id,
            period_number=period_number,
            position_code=position_code,
            roster_slot=roster_slot,
        )

    def list_team_period(self, team_id: int, period_number: int) -> List[RosterEntry]:
        """A team's roster for a period, active slots first."""
        return self.query().filter(
            RosterEntry.team_id == team_id,
            RosterEntry.period_number == period_number,
        ).order_by(
            RosterEntry.is_active.desc(),
            RosterEntry.position_code,
            RosterEntry.roster_slot,
        ).all()

    def list_by_season(self, season_id: int) -> List[RosterEntry]:
        return self.query().filter(RosterEntry.season_id == season_id).order_by(
            RosterEntry.period_number,
            RosterEntry.team_id,
            RosterEntry.position_code,
            RosterEntry.roster_slot,
        ).all()

    def list_unmatched(self, season_id: int) -> List[RosterEntry]:
        """Entries with no canonical player yet, in team/period order."""
        return self.query().filter(
            RosterEntry.season_id == season_id,
            RosterEntry.player_id.is_(None),
        ).order_by(RosterEntry.team_id, RosterEntry.period_number, RosterEntry.id).all()

    def list_unlinked_pitching_staffs(self, season_id: int, team_pitching_code: str) -> List[RosterEntry]:
        return self.query().filter(
            RosterEntry.season_id == season_id,
            RosterEntry.position_code == team_pitching_code,
            RosterEntry.pitching_staff_id.is_(None),
        ).order_by(RosterEntry.id).all()

    # ========================================================================
    # Deletes
    # ========================================================================

    def delete_team_period(self, team_id: int, period_number: int) -> int:
        return self.delete_where(
            RosterEntry.team_id == team_id,
            RosterEntry.period_number == period_number,
        )

    def delete_by_season(self, season_id: int) -> int:
        return self.delete_where(RosterEntry.season_id == season_id)
