"""
Repair passes that link roster slots to canonical reference rows.

Ingest only links a roster slot on an exact normalized-name match. These
passes run afterwards, once the players and MLB teams tables are loaded:

1. match_unresolved_players: exact normalized name, then prefix
   ("mike trout" -> "mike trout jr" style variations). Team-pitching slots
   are never matched to a player.
2. link_pitching_staffs: team-pitching slots against MLB team short names,
   exact, then containment in either direction, then rapidfuzz WRatio.

The prefix step can return a wrong player when one normalized name is a
prefix of another ("will smith" / "will smithers"); the lowest player id wins.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store, UnitOfWork
from fantrax_pipeline.core.logging import run_context
from fantrax_pipeline.models import MlbTeam
from fantrax_pipeline.repositories.league import RosterRepository
from fantrax_pipeline.repositories.mlb import MlbTeamRepository, PlayerRepository
from fantrax_pipeline.services.sync.utils.name_normalizer import name_similarity, normalize_player_name

logger = logging.getLogger(__name__)


@dataclass
class MatchSummary:
    """Counts from one repair pass."""
    processed: int = 0
    matched: int = 0
    still_unmatched: int = 0
    unmatched_names: List[str] = field(default_factory=list)


class RosterMatcher:
    """Links roster slots to canonical players and MLB pitching staffs."""

    def __init__(
        self,
        store: Store,
        team_pitching_code: Optional[str] = None,
        fuzzy_threshold: Optional[int] = None
    ):
        self.store = store
        self.team_pitching_code = team_pitching_code or settings.TEAM_PITCHING_CODE
        self.fuzzy_threshold = (
            fuzzy_threshold if fuzzy_threshold is not None else settings.PITCHING_STAFF_FUZZY_THRESHOLD
        )

    # ========================================================================
    # Players
    # ========================================================================

    def match_unresolved_players(self, season_id: int, uow: Optional[UnitOfWork] = None) -> MatchSummary:
        """
        Link every unmatched, non team-pitching roster slot of a season.

        A slot that already has a player is never touched.
        """
        summary = MatchSummary()
        with run_context(), self.store.unit_of_work(uow) as work:
            rosters = RosterRepository(work.session)
            players = PlayerRepository(work.session)

            for entry in rosters.list_unmatched(season_id):
                if entry.position_code == self.team_pitching_code:
                    continue
                summary.processed += 1

                normalized = entry.player_name_normalized or normalize_player_name(entry.player_name)
                if not normalized:
                    summary.still_unmatched += 1
                    summary.unmatched_names.append(entry.player_name)
                    continue

                player = players.find_by_normalized_name(normalized)
                if player is None:
                    player = players.find_by_name_prefix(normalized)
                    if player is not None:
                        logger.debug(f"Prefix match: {entry.player_name!r} -> {player.full_name!r}")

                if player is None:
                    summary.still_unmatched += 1
                    summary.unmatched_names.append(entry.player_name)
                    continue

                entry.player_id = player.id
                if not entry.player_name_normalized:
                    entry.player_name_normalized = normalized
                summary.matched += 1

            work.flush()

        logger.info(
            f"Season {season_id}: matched {summary.matched}/{summary.processed} roster players, "
            f"{summary.still_unmatched} still unmatched"
        )
        return summary

    # ========================================================================
    # Pitching staffs
    # ========================================================================

    def link_pitching_staffs(self, season_id: int, uow: Optional[UnitOfWork] = None) -> MatchSummary:
        """Link team-pitching slots with no pitching staff to an MLB team."""
        summary = MatchSummary()
        with run_context(), self.store.unit_of_work(uow) as work:
            teams = MlbTeamRepository(work.session).list_all()
            if not teams:
                logger.warning("No MLB teams loaded, cannot link pitching staffs")

            entries = RosterRepository(work.session).list_unlinked_pitching_staffs(
                season_id, self.team_pitching_code
            )
            for entry in entries:
                summary.processed += 1
                team = self.find_pitching_staff(entry.player_name, teams)
                if team is None:
                    summary.still_unmatched += 1
                    summary.unmatched_names.append(entry.player_name)
                    continue

                entry.pitching_staff_id = team.id
                summary.matched += 1
                logger.debug(f"Linked {entry.player_name!r} to {team.name} ({team.id})")

            work.flush()

        if summary.still_unmatched:
            logger.warning(f"Unmatched pitching staffs: {sorted(set(summary.unmatched_names))}")
        logger.info(f"Season {season_id}: linked {summary.matched}/{summary.processed} pitching staffs")
        return summary

    def find_pitching_staff(self, slot_name: str, teams: List[MlbTeam]) -> Optional[MlbTeam]:
        """Best MLB team for a team-pitching slot name, or None."""
        name = (slot_name or "").strip().lower()
        if not name:
            return None

        candidates = [t for t in teams if t.short_name]
        for team in candidates:
            if team.short_name.lower() == name:
                return team

        for team in candidates:
            short = team.short_name.lower()
            if short in name or name in short:
                return team

        best, best_score = None, 0.0
        for team in teams:
            score = max(name_similarity(slot_name, team.name), name_similarity(slot_name, team.short_name or ""))
            if score > best_score:
                best, best_score = team, score

        if best is not None and best_score >= self.fuzzy_threshold:
            logger.debug(f"Fuzzy match {slot_name!r} -> {best.name} (score {best_score:.1f})")
            return best
        return None
