"""
Player daily stat repository.

Raw per-player, per-date lines scraped from the fantasy platform. These rows
are the only input to the derived team and matchup tables.

Usage:
    repo = PlayerDailyStatRepository(db)
    repo.upsert_stat(date(2023, 5, 10), "04aq1", team.id, season.id, period_number=5, ...)
    active = repo.list_active_for_team(date(2023, 5, 10), team.id)
"""
from datetime import date
from typing import Optional, List

from fantrax_pipeline.models import PlayerDailyStat
from fantrax_pipeline.repositories.base import BaseRepository

HITTING_FIELDS = ("ab", "h", "r", "singles", "doubles", "triples", "hr", "rbi", "bb", "sb", "cs")
PITCHING_FIELDS = (
    "wins",
    "innings_pitched",
    "ip_outs",
    "earned_runs",
    "hits_allowed",
    "bb_allowed",
    "h_plus_bb",
    "k",
)


def innings_to_outs(innings_pitched) -> int:
    """
    Convert a box-score innings value to outs.

    "6.1" means six full innings and one out, so 6 * 3 + 1 = 19.
    """
    if innings_pitched is None or innings_pitched == "":
        return 0
    text = str(innings_pitched).strip()
    full, _, partial = text.partition(".")
    outs = int(full or 0) * 3
    if partial:
        outs += int(partial[0])
    return outs


class PlayerDailyStatRepository(BaseRepository[PlayerDailyStat]):
    """Repository for raw per-player daily stats."""

    def __init__(self, db):
        super().__init__(PlayerDailyStat, db)

    def upsert_stat(
        self,
        date: date,
        player_id: str,
        fantasy_team_id: int,
        season_id: int,
        period_number: Optional[int] = None,
        position_played: Optional[str] = None,
        active: bool = False,
        fantasy_points: float = 0.0,
        player_name: Optional[str] = None,
        mlb_team: Optional[str] = None,
        **counters
    ) -> PlayerDailyStat:
        """
        Insert or replace one player's line for a date.

        Counters not supplied are written as zero. ``ip_outs`` is derived from
        ``innings_pitched`` when not given.
        """
        fields = {
            "season_id": season_id,
            "period_number": period_number,
            "position_played": position_played,
            "active": bool(active),
            "fantasy_points": float(fantasy_points or 0),
            "player_name": player_name,
            "mlb_team": mlb_team,
        }
        for name in HITTING_FIELDS:
            fields[name] = int(counters.get(name) or 0)
        for name in PITCHING_FIELDS:
            if name == "innings_pitched":
                fields[name] = counters.get(name)
            elif name == "ip_outs":
                outs = counters.get("ip_outs")
                fields[name] = int(outs) if outs is not None else innings_to_outs(counters.get("innings_pitched"))
            else:
                fields[name] = int(counters.get(name) or 0)

        return self.upsert(
            {"date": date, "player_id": player_id, "fantasy_team_id": fantasy_team_id},
            fields,
        )

    # ========================================================================
    # Lookups
    # ========================================================================

    def find_stat(self, date: date, player_id: str, fantasy_team_id: int) -> Optional[PlayerDailyStat]:
        return self.filter_by_first(date=date, player_id=player_id, fantasy_team_id=fantasy_team_id)

    def list_by_date(self, date: date, season_id: int) -> List[PlayerDailyStat]:
        return self.query().filter(
            PlayerDailyStat.date == date,
            PlayerDailyStat.season_id == season_id,
        ).order_by(PlayerDailyStat.fantasy_team_id, PlayerDailyStat.position_played).all()

    def list_active_for_team(self, date: date, fantasy_team_id: int) -> List[PlayerDailyStat]:
        """Rows that count toward the team's score on a date."""
        return self.query().filter(
            PlayerDailyStat.date == date,
            PlayerDailyStat.fantasy_team_id == fantasy_team_id,
            PlayerDailyStat.active.is_(True),
        ).order_by(PlayerDailyStat.id).all()

    def list_by_player(self, player_id: str, season_id: Optional[int] = None) -> List[PlayerDailyStat]:
        query = self.query().filter(PlayerDailyStat.player_id == player_id)
        if season_id is not None:
            query = query.filter(PlayerDailyStat.season_id == season_id)
        return query.order_by(PlayerDailyStat.date.desc()).all()

    def find_period(self, date: date, season_id: int) -> Optional[int]:
        """Scoring period of any row on that date, or None if the date has no rows."""
        row = self.db.query(PlayerDailyStat.period_number).filter(
            PlayerDailyStat.date == date,
            PlayerDailyStat.season_id == season_id,
            PlayerDailyStat.period_number.isnot(None),
        ).first()
        return row[0] if row else None

    def team_ids_for_date(self, date: date, season_id: int) -> List[int]:
        rows = self.db.query(PlayerDailyStat.fantasy_team_id).filter(
            PlayerDailyStat.date == date,
            PlayerDailyStat.season_id == season_id,
        ).distinct().all()
        return sorted(row[0] for row in rows)

    def delete_by_date(self, date: date, season_id: int) -> int:
        return self.delete_where(
            PlayerDailyStat.date == date,
            PlayerDailyStat.season_id == season_id,
        )
