"""
MLB Team Repository.

MLB clubs, keyed by the MLB team id. Used to link team-pitching roster slots
to a real pitching staff.
"""
from typing import Optional, List

from sqlalchemy import or_

from fantrax_pipeline.models import MlbTeam
from fantrax_pipeline.repositories.base import BaseRepository


class MlbTeamRepository(BaseRepository[MlbTeam]):
    """Repository for MLB clubs."""

    def __init__(self, db):
        super().__init__(MlbTeam, db)

    def upsert_team(
        self,
        id: int,
        name: str,
        abbreviation: Optional[str] = None,
        short_name: Optional[str] = None
    ) -> MlbTeam:
        return self.upsert(
            {"id": id},
            {"name": name, "abbreviation": abbreviation, "short_name": short_name},
        )

    def find_by_abbreviation(self, abbreviation: str) -> Optional[MlbTeam]:
        return self.where_first(MlbTeam.abbreviation == abbreviation)

    def find_by_name(self, name: str) -> List[MlbTeam]:
        """Partial match on full or short name."""
        pattern = f"%{name}%"
        return self.query().filter(
            or_(MlbTeam.name.ilike(pattern), MlbTeam.short_name.ilike(pattern))
        ).order_by(MlbTeam.name).all()

    def list_all(self) -> List[MlbTeam]:
        return self.query().order_by(MlbTeam.name).all()
