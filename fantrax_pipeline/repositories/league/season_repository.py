"""
Season Repository.

Seasons are keyed by the platform league id. The year is refreshed on every
upsert; the display name only when the scrape carries one.

Usage:
    repo = SeasonRepository(db)
    season = repo.upsert_season("2024", "abc123xyz", "2024 Season")
"""
from typing import Optional, List

from fantrax_pipeline.models import Season
from fantrax_pipeline.repositories.base import BaseRepository


class SeasonRepository(BaseRepository[Season]):
    """Repository for fantasy seasons."""

    def __init__(self, db):
        super().__init__(Season, db)

    def upsert_season(self, year: str, league_id: str, name: Optional[str] = None) -> Season:
        """
        Insert or refresh a season by league id.

        A missing name keeps the stored one; "{year} Season" is only the
        default for a new row.
        """
        name = name or None
        if name is None and self.find_by_league_id(league_id) is None:
            name = f"{year} Season"
        return self.upsert(
            {"league_id": league_id},
            {"year": str(year), "name": name},
            keep_existing=("name",),
        )

    def find_by_league_id(self, league_id: str) -> Optional[Season]:
        return self.where_first(Season.league_id == league_id)

    def find_by_year(self, year: str) -> Optional[Season]:
        return self.where_first(Season.year == str(year))

    def list_all(self) -> List[Season]:
        """All seasons, most recent year first."""
        return self.query().order_by(Season.year.desc()).all()
