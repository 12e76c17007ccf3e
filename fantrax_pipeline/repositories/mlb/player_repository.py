"""
Player Repository for canonical MLB players.

The primary key is the MLB player id. ``normalized_full_name`` is the join
column for roster name matching.
"""
from typing import Optional, List

from fantrax_pipeline.models import Player
from fantrax_pipeline.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for canonical MLB players."""

    def __init__(self, db):
        super().__init__(Player, db)

    def upsert_player(
        self,
        id: int,
        full_name: str,
        normalized_full_name: Optional[str] = None,
        **attributes
    ) -> Player:
        """
        Insert or refresh a player by MLB id.

        ``normalized_full_name`` is derived from ``full_name`` when omitted.
        """
        if normalized_full_name is None and full_name:
            from fantrax_pipeline.services.sync.utils.name_normalizer import normalize_player_name
            normalized_full_name = normalize_player_name(full_name)

        fields = {"full_name": full_name, "normalized_full_name": normalized_full_name}
        for name in ("first_name", "last_name", "birth_date", "active", "bat_side", "pitch_hand", "mlb_debut_date"):
            if name in attributes:
                fields[name] = attributes[name]
        return self.upsert({"id": id}, fields)

    # ========================================================================
    # Name-based Lookups
    # ========================================================================

    def find_by_normalized_name(self, normalized_name: str) -> Optional[Player]:
        """Exact match on the normalized full name."""
        return self.query().filter(
            Player.normalized_full_name == normalized_name
        ).order_by(Player.id).first()

    def find_by_name_prefix(self, normalized_name: str) -> Optional[Player]:
        """
        First player whose normalized name starts with the given text.

        Heuristic: "will smith" also matches "will smithers".
        """
        pattern = normalized_name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        return self.query().filter(
            Player.normalized_full_name.like(pattern, escape="\\")
        ).order_by(Player.id).first()

    def search_by_name(self, name: str, limit: int = 10) -> List[Player]:
        """Case-insensitive partial match on the display name."""
        return self.query().filter(
            Player.full_name.ilike(f"%{name}%")
        ).order_by(Player.full_name).limit(limit).all()
