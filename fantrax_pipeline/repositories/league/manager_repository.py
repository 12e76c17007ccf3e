"""
Manager Repository.

Managers are reference data maintained by hand; scrapes never write them.
"""
from typing import Optional, List

from sqlalchemy import or_

from fantrax_pipeline.models import Manager
from fantrax_pipeline.repositories.base import BaseRepository


class ManagerRepository(BaseRepository[Manager]):
    """Repository for league managers."""

    def __init__(self, db):
        super().__init__(Manager, db)

    def upsert_manager(
        self,
        name: str,
        active_from: Optional[int] = None,
        active_until: Optional[int] = None,
        email: Optional[str] = None,
        avatar_url: Optional[str] = None
    ) -> Manager:
        return self.upsert(
            {"name": name},
            {
                "active_from": active_from,
                "active_until": active_until,
                "email": email,
                "avatar_url": avatar_url,
            },
            keep_existing=("email", "avatar_url"),
        )

    def find_by_name(self, name: str) -> Optional[Manager]:
        return self.where_first(Manager.name == name)

    def active_in(self, year: int) -> List[Manager]:
        """
        Managers active during the given season year.

        A NULL ``active_until`` means the manager is still in the league.
        """
        return self.query().filter(
            or_(Manager.active_from.is_(None), Manager.active_from <= year),
            or_(Manager.active_until.is_(None), Manager.active_until >= year),
        ).order_by(Manager.name).all()
