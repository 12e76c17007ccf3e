"""
Bulk reconciliation of scraped batches into the store.

Each ``reconcile_*`` method takes one logical unit of scraped data (a season's
schedule, a team-period roster, one date's player stats) and writes it in a
single unit of work:

- identities are resolved through the IdentityResolver
- every record runs inside its own SAVEPOINT, so a bad record is rolled back
  and reported as a RowError while the rest of the batch still commits
- delete-then-reinsert steps (roster replace, day replace) are not
  per-record: if they fail the whole unit is rolled back
- a commit failure rolls back and raises TransactionError

Callers get a BatchResult back and decide what to do with partial success.

Usage:
    store = Store().open()
    coordinator = ReconciliationCoordinator(store)
    result = coordinator.reconcile_schedule(records, year="2024", league_id="abc123xyz")
    if result.errors:
        ...
"""
import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Type, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store, UnitOfWork
from fantrax_pipeline.core.exceptions import (
    RowError,
    TransactionError,
    UnresolvedReferenceError,
    ValidationError,
)
from fantrax_pipeline.core.logging import run_context
from fantrax_pipeline.repositories.base import BaseRepository
from fantrax_pipeline.repositories.league import (
    SeasonRepository,
    TeamRepository,
    MatchupRepository,
    StandingRepository,
    SeasonStatRepository,
    HittingStatRepository,
    PitchingStatRepository,
    RosterRepository,
)
from fantrax_pipeline.repositories.mlb import (
    BatterGameStatRepository,
    MlbGameRepository,
    MlbTeamRepository,
    PlayerRepository,
)
from fantrax_pipeline.repositories.stats import PlayerDailyStatRepository
from fantrax_pipeline.services.aggregation.daily_aggregator import DailyAggregator, as_date
from fantrax_pipeline.services.sync.identity_resolver import IdentityResolver
from fantrax_pipeline.services.sync.records import (
    BatterLineRecord,
    HittingPlayerRecord,
    HittingStatRecord,
    MatchupRecord,
    MlbGameRecord,
    MlbTeamRecord,
    PitchingStatRecord,
    PlayerRecord,
    RosterRecord,
    SeasonStatRecord,
    StandingRecord,
    TeamDailyBatch,
    TeamPitchingRecord,
    TeamScopedRecord,
    extract_batter_lines,
    parse_record,
)
from fantrax_pipeline.services.sync.utils.name_normalizer import normalize_player_name

logger = logging.getLogger(__name__)

# Failures that skip one record instead of aborting the unit
ROW_ERRORS = (ValidationError, UnresolvedReferenceError, SQLAlchemyError, ValueError)

Mapper = Callable[[Any], Any]
Writer = Callable[[Session, Any], Any]


@dataclass
class BatchResult:
    """Outcome of one reconcile call."""
    processed: int = 0
    errors: List[RowError] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def __repr__(self):
        return f"BatchResult(processed={self.processed}, failed={self.failed}, details={self.details})"


class ReconciliationCoordinator:
    """Writes scraped batches into the store, one unit of work per batch."""

    def __init__(
        self,
        store: Store,
        aggregator: Optional[DailyAggregator] = None,
        team_pitching_code: Optional[str] = None
    ):
        self.store = store
        self.team_pitching_code = team_pitching_code or settings.TEAM_PITCHING_CODE
        self.aggregator = aggregator or DailyAggregator(store, self.team_pitching_code)

    # ========================================================================
    # Generic batch primitive
    # ========================================================================

    def reconcile(
        self,
        batch: Sequence[Any],
        mapper: Optional[Mapper],
        writer: Writer,
        uow: Optional[UnitOfWork] = None,
        label: str = "records"
    ) -> BatchResult:
        """
        Map and write every record of ``batch`` in one unit of work.

        Args:
            batch: Raw records
            mapper: Turns a raw record into what ``writer`` takes; may raise
                ValidationError. None passes records through unchanged.
            writer: Called as ``writer(session, mapped)``
            uow: Join this unit of work instead of opening one
            label: Name used in log lines

        Returns:
            BatchResult with the count written and one RowError per skipped record

        Raises:
            TransactionError: If the unit could not be committed
        """
        result = BatchResult()
        with run_context(), self.store.unit_of_work(uow) as work:
            for index, raw in enumerate(batch):
                try:
                    with work.savepoint():
                        record = mapper(raw) if mapper is not None else raw
                        writer(work.session, record)
                except ROW_ERRORS as e:
                    error = RowError.from_exception(index, raw, e)
                    result.errors.append(error)
                    logger.warning(f"Skipped {label} row {index}: {error.error_type}: {error.reason}")
                    continue
                result.processed += 1

            logger.info(f"Reconciled {result.processed}/{len(batch)} {label} ({result.failed} skipped)")
        return result

    # ========================================================================
    # Schedule
    # ========================================================================

    def reconcile_schedule(
        self,
        records: Sequence[Dict[str, Any]],
        year: str,
        league_id: str,
        season_name: Optional[str] = None,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """
        Write a season's schedule: the season, every team seen, every matchup.

        Teams are written first so matchups can resolve both sides. A matchup
        whose team is unknown is skipped as a RowError.
        """
        with run_context(), self.store.unit_of_work(uow) as work:
            name = season_name or next(
                (r.get("season") for r in records if isinstance(r, dict) and r.get("season")), None
            )
            season = SeasonRepository(work.session).upsert_season(year, league_id, name)
            logger.info(f"Season {season.year} ({league_id}) has id {season.id}")

            if not records:
                return BatchResult(details={"season_id": season.id, "teams": 0, "matchups": 0})

            teams: Dict[str, Dict[str, str]] = {}
            for record in records:
                if not isinstance(record, dict):
                    continue
                for side in ("away", "home"):
                    team_id = record.get(f"{side}TeamId")
                    team_name = record.get(f"{side}TeamName")
                    if team_id and team_name:
                        teams[str(team_id)] = {"team_id": str(team_id), "name": team_name}

            team_result = self.reconcile(
                list(teams.values()),
                None,
                lambda db, team: TeamRepository(db).upsert_team(team["team_id"], season.id, team["name"]),
                uow=work,
                label="teams",
            )

            resolver = IdentityResolver(work.session)

            def write_matchup(db: Session, record: MatchupRecord):
                away = resolver.resolve_team(record.away_team_id, season.id)
                home = resolver.resolve_team(record.home_team_id, season.id)
                return MatchupRepository(db).upsert_matchup(
                    season.id,
                    record.period_number,
                    away.id,
                    home.id,
                    period_type=record.period_type,
                    date_range=record.date_range,
                    matchup_id=record.matchup_id,
                )

            result = self.reconcile(
                records,
                lambda raw: parse_record(MatchupRecord, raw),
                write_matchup,
                uow=work,
                label="matchups",
            )
            result.details = {
                "season_id": season.id,
                "teams": team_result.processed,
                "matchups": result.processed,
                "team_errors": team_result.errors,
            }
            return result

    # ========================================================================
    # Standings and season-long team stats
    # ========================================================================

    def reconcile_standings(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """Replace each team's standings row; teams are created or refreshed from the scrape."""
        with self.store.unit_of_work(uow) as work:
            resolver = IdentityResolver(work.session)

            def write_standing(db: Session, record: StandingRecord):
                team = resolver.resolve_team(
                    record.team_id, season_id, record.team_name, record.team_icon_url, refresh=True
                )
                return StandingRepository(db).upsert_standing(season_id, team.id, **record.stats())

            return self.reconcile(
                records,
                lambda raw: parse_record(StandingRecord, raw),
                write_standing,
                uow=work,
                label="standings",
            )

    def reconcile_season_stats(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        return self._reconcile_team_stats(records, season_id, SeasonStatRecord, SeasonStatRepository, uow, "season stats")

    def reconcile_hitting_stats(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        return self._reconcile_team_stats(records, season_id, HittingStatRecord, HittingStatRepository, uow, "hitting stats")

    def reconcile_pitching_stats(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        return self._reconcile_team_stats(records, season_id, PitchingStatRecord, PitchingStatRepository, uow, "pitching stats")

    def _reconcile_team_stats(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        record_type: Type[TeamScopedRecord],
        repository_type: Type[BaseRepository],
        uow: Optional[UnitOfWork],
        label: str
    ) -> BatchResult:
        with self.store.unit_of_work(uow) as work:
            resolver = IdentityResolver(work.session)

            def write_stats(db: Session, record):
                team = resolver.resolve_team(record.team_id, season_id, record.team_name)
                return repository_type(db).upsert_stats(season_id, team.id, **record.stats())

            return self.reconcile(
                records,
                lambda raw: parse_record(record_type, raw),
                write_stats,
                uow=work,
                label=label,
            )

    # ========================================================================
    # Rosters
    # ========================================================================

    def reconcile_roster(
        self,
        records: Sequence[Dict[str, Any]],
        season_id: int,
        team_id: int,
        period_number: int,
        replace: bool = False,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """
        Write one team's roster for one period.

        Args:
            team_id: Internal team row id
            replace: Delete the team-period roster first. A failed delete
                aborts the whole unit.

        Player slots are linked to a canonical player on exact normalized name;
        team-pitching slots are linked to an MLB team instead.
        """
        with run_context(), self.store.unit_of_work(uow) as work:
            deleted = 0
            if replace:
                try:
                    deleted = RosterRepository(work.session).delete_team_period(team_id, period_number)
                except SQLAlchemyError as e:
                    raise TransactionError(
                        f"Could not clear roster for team {team_id}, period {period_number}: {e}"
                    ) from e

            resolver = IdentityResolver(work.session)

            def write_entry(db: Session, record: RosterRecord):
                normalized = record.normalized_name or normalize_player_name(record.player_name)
                player_id = None
                pitching_staff_id = None
                if record.position_code == self.team_pitching_code:
                    pitching_staff_id = resolver.resolve_mlb_team_id(record.player_name)
                else:
                    player_id = resolver.resolve_player_id(normalized)

                return RosterRepository(db).upsert_entry(
                    season_id,
                    team_id,
                    period_number,
                    record.position_code,
                    record.roster_slot,
                    record.player_name,
                    is_active=record.is_active,
                    player_name_normalized=normalized,
                    player_id=player_id,
                    mlb_team=record.mlb_team,
                    bat_side=record.bat_side,
                    fantrax_player_id=record.fantrax_player_id,
                    pitching_staff_id=pitching_staff_id,
                )

            result = self.reconcile(
                records,
                lambda raw: parse_record(RosterRecord, raw),
                write_entry,
                uow=work,
                label="roster entries",
            )
            result.details["deleted"] = deleted
            return result

    # ========================================================================
    # Daily player stats
    # ========================================================================

    def reconcile_player_daily_stats(
        self,
        team_batches: Iterable[Dict[str, Any]],
        date: Union[str, date_type],
        season_id: int,
        replace: bool = True,
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """
        Ingest one date of per-team player stats and rebuild the derived rows.

        Steps, all in one unit of work:
        1. with ``replace``, delete the date's player/team/matchup rows
        2. upsert every hitter and team-pitching line (one RowError per bad line)
        3. recompute the aggregate of every team touched
        4. recompute the date's matchup results

        Hitters are keyed by platform player id; the team-pitching line is
        keyed by ``TmP_<platform team id>``.

        Raises:
            TransactionError: If the delete, the recompute or the commit fails
        """
        day = as_date(date)
        entries = list(self._flatten_team_batches(team_batches))

        with run_context(), self.store.unit_of_work(uow) as work:
            deleted = 0
            if replace:
                deleted = self.aggregator.replace_day_data(day, season_id, uow=work)

            resolver = IdentityResolver(work.session)
            touched: set = set()

            def write_line(db: Session, entry: Dict[str, Any]):
                header = parse_record(TeamDailyBatch, entry["team"])
                team = resolver.resolve_team(header.team_id, season_id)
                repo = PlayerDailyStatRepository(db)

                if entry["kind"] == "pitching":
                    line = parse_record(TeamPitchingRecord, entry["line"])
                    row = repo.upsert_stat(
                        day,
                        f"{self.team_pitching_code}_{header.team_id}",
                        team.id,
                        season_id,
                        period_number=header.period_number,
                        position_played=self.team_pitching_code,
                        active=line.active,
                        fantasy_points=line.fantasy_points,
                        player_name=line.team_name or header.team_name,
                        **line.counters(),
                    )
                else:
                    line = parse_record(HittingPlayerRecord, entry["line"])
                    row = repo.upsert_stat(
                        day,
                        line.player_id,
                        team.id,
                        season_id,
                        period_number=header.period_number,
                        position_played=line.position_played,
                        active=line.active,
                        fantasy_points=line.fantasy_points,
                        player_name=line.name,
                        mlb_team=line.mlb_team,
                        **line.counters(),
                    )
                touched.add(team.id)
                return row

            result = self.reconcile(entries, None, write_line, uow=work, label=f"player stat lines for {day}")

            for team_id in sorted(touched):
                self.aggregator.recompute_team_daily(day, team_id, season_id, uow=work)
            matchups = self.aggregator.recompute_matchup_results(day, season_id, uow=work)

            result.details = {"date": day.isoformat(), "deleted": deleted, "teams": len(touched), "matchups": matchups}
            return result

    @staticmethod
    def _flatten_team_batches(team_batches: Iterable[Any]):
        """One entry per player line, carrying its team header."""
        for batch in team_batches:
            if not isinstance(batch, dict):
                yield {"kind": "hitting", "team": batch, "line": None}
                continue
            header = {k: v for k, v in batch.items() if k not in ("hittingPlayers", "pitchingPlayers")}
            for field, kind in (("hittingPlayers", "hitting"), ("pitchingPlayers", "pitching")):
                lines = batch.get(field) or []
                if not isinstance(lines, (list, tuple)):
                    # The whole batch fails header validation and becomes one RowError
                    yield {"kind": kind, "team": batch, "line": None}
                    continue
                for line in lines:
                    yield {"kind": kind, "team": header, "line": line}

    # ========================================================================
    # MLB reference data and games
    # ========================================================================

    def reconcile_mlb_teams(self, records: Sequence[Dict[str, Any]], uow: Optional[UnitOfWork] = None) -> BatchResult:
        return self.reconcile(
            records,
            lambda raw: parse_record(MlbTeamRecord, raw),
            lambda db, r: MlbTeamRepository(db).upsert_team(r.id, r.name, r.abbreviation, r.short_name),
            uow=uow,
            label="MLB teams",
        )

    def reconcile_players(self, records: Sequence[Dict[str, Any]], uow: Optional[UnitOfWork] = None) -> BatchResult:
        """Canonical players from the MLB people endpoint."""
        def write_player(db: Session, record: PlayerRecord):
            attributes = record.model_dump(exclude={"id", "full_name"})
            return PlayerRepository(db).upsert_player(record.id, record.full_name, **attributes)

        return self.reconcile(
            records,
            lambda raw: parse_record(PlayerRecord, raw),
            write_player,
            uow=uow,
            label="players",
        )

    def reconcile_mlb_games(self, records: Sequence[Dict[str, Any]], uow: Optional[UnitOfWork] = None) -> BatchResult:
        """
        Games in the MLB schedule API shape (``gamePk``, ``status``, ``teams``,
        ``venue``) or already flattened.
        """
        def to_game(raw):
            if isinstance(raw, dict) and ("teams" in raw or "status" in raw or "venue" in raw):
                return MlbGameRecord.from_api(raw)
            return parse_record(MlbGameRecord, raw)

        return self.reconcile(
            records,
            to_game,
            lambda db, game: MlbGameRepository(db).upsert_game(**game.model_dump()),
            uow=uow,
            label="MLB games",
        )

    def reconcile_batter_game_stats(
        self,
        records: Sequence[Dict[str, Any]],
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """Flattened boxscore batting lines (see ``extract_batter_lines``)."""
        return self.reconcile(
            records,
            lambda raw: parse_record(BatterLineRecord, raw),
            lambda db, line: BatterGameStatRepository(db).upsert_stat(**line.model_dump()),
            uow=uow,
            label="batter lines",
        )

    def reconcile_boxscore(
        self,
        game_pk: int,
        boxscore: Dict[str, Any],
        uow: Optional[UnitOfWork] = None
    ) -> BatchResult:
        """Extract and write every batting line of one game's boxscore."""
        lines = extract_batter_lines(game_pk, boxscore)
        result = self.reconcile_batter_game_stats(lines, uow=uow)
        result.details["game_pk"] = game_pk
        return result
