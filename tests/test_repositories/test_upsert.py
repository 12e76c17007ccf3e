"""Tests for the natural-key upsert and the entity repositories.

Test Strategy:
1. Insert on a new natural key, update in place on a known one
2. Replaying the same values issues no UPDATE
3. Fields listed as keep-existing survive a NULL from a later scrape
4. Missing natural-key values are rejected before any write
5. Unique constraints back every natural key
6. Entity-specific helpers (innings to outs, schedule ordering, deletes)
"""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from fantrax_pipeline.core.exceptions import TransactionError, ValidationError
from fantrax_pipeline.models import PeriodType, Team
from fantrax_pipeline.repositories import (
    ManagerRepository,
    MatchupRepository,
    PlayerDailyStatRepository,
    PlayerRepository,
    RosterRepository,
    SeasonRepository,
    StandingRepository,
    TeamRepository,
)
from fantrax_pipeline.repositories.stats import innings_to_outs


class TestUpsert:
    """Insert-or-update behaviour of BaseRepository.upsert."""

    # Insert / Update
    # ─────────────────────────────────────────────────────────────

    def test_inserts_new_row(self, store, season):
        """A new natural key creates a row with a surrogate id."""
        with store.unit_of_work() as uow:
            team = TeamRepository(uow.session).upsert_team("tmX", season.id, "Expansion")

        assert team.id is not None
        assert team.name == "Expansion"

    def test_same_key_updates_in_place(self, store, season):
        """A second upsert with the same key updates the existing row."""
        with store.unit_of_work() as uow:
            first = TeamRepository(uow.session).upsert_team("tmX", season.id, "Expansion")
        with store.unit_of_work() as uow:
            second = TeamRepository(uow.session).upsert_team("tmX", season.id, "Renamed")

        assert second.id == first.id
        with store.unit_of_work() as uow:
            rows = uow.session.query(Team).filter_by(team_id="tmX").all()
            assert len(rows) == 1
            assert rows[0].name == "Renamed"

    def test_replay_does_not_issue_update(self, store, season):
        """Unchanged values leave updated_at untouched."""
        with store.unit_of_work() as uow:
            first = StandingRepository(uow.session).upsert_standing(season.id, _team(uow, season).id, rank=1, wins=10)
        with store.unit_of_work() as uow:
            second = StandingRepository(uow.session).upsert_standing(season.id, first.team_id, rank=1, wins=10)

        assert second.id == first.id
        assert second.updated_at == first.updated_at

    def test_standing_upsert_replaces_whole_row(self, store, season):
        """Values missing from the second scrape are written as NULL."""
        with store.unit_of_work() as uow:
            team = _team(uow, season)
            StandingRepository(uow.session).upsert_standing(season.id, team.id, rank=1, streak="W3")
        with store.unit_of_work() as uow:
            row = StandingRepository(uow.session).upsert_standing(season.id, team.id, rank=2)

        assert row.rank == 2
        assert row.streak is None

    # Keep-existing Fields
    # ─────────────────────────────────────────────────────────────

    def test_missing_icon_keeps_stored_icon(self, store, season):
        """A NULL icon URL from a later scrape does not erase the stored one."""
        with store.unit_of_work() as uow:
            TeamRepository(uow.session).upsert_team("tmX", season.id, "Expansion", "https://img/x.png")
        with store.unit_of_work() as uow:
            team = TeamRepository(uow.session).upsert_team("tmX", season.id, "Expansion", None)

        assert team.icon_url == "https://img/x.png"

    def test_resolved_player_id_is_never_reset(self, store, season, players):
        """A roster slot keeps its canonical player when re-scraped without one."""
        with store.unit_of_work() as uow:
            team = _team(uow, season)
            repo = RosterRepository(uow.session)
            repo.upsert_entry(season.id, team.id, 5, "OF", 1, "Mike Trout", player_id=545361)
            entry = repo.upsert_entry(season.id, team.id, 5, "OF", 1, "Mike Trout", player_id=None)

            assert entry.player_id == 545361

    def test_manager_contact_fields_are_kept(self, store):
        """Email and avatar survive an upsert that omits them."""
        with store.unit_of_work() as uow:
            repo = ManagerRepository(uow.session)
            repo.upsert_manager("Sam", 2019, None, email="sam@example.com")
            manager = repo.upsert_manager("Sam", 2019, 2023)

            assert manager.email == "sam@example.com"
            assert manager.active_until == 2023

    def test_season_name_survives_unnamed_rescrape(self, store):
        """A stored season name is not replaced by the year default."""
        with store.unit_of_work() as uow:
            SeasonRepository(uow.session).upsert_season("2023", "lgX", "Dynasty League 2023")
        with store.unit_of_work() as uow:
            season = SeasonRepository(uow.session).upsert_season("2023", "lgX")

        assert season.name == "Dynasty League 2023"

    def test_new_season_without_name_gets_year_default(self, store):
        """The year default only applies when the season is created."""
        with store.unit_of_work() as uow:
            season = SeasonRepository(uow.session).upsert_season("2024", "lgY", "")

        assert season.name == "2024 Season"

    # Validation
    # ─────────────────────────────────────────────────────────────

    def test_rejects_missing_key_value(self, store, season):
        """A None natural-key value raises ValidationError naming the field."""
        with store.unit_of_work() as uow:
            with pytest.raises(ValidationError) as exc_info:
                TeamRepository(uow.session).upsert_team(None, season.id, "Nobody")

        assert exc_info.value.entity == "Team"
        assert exc_info.value.fields == ["team_id"]

    def test_rejects_empty_key_value(self, store):
        """An empty-string natural key is treated as missing."""
        with store.unit_of_work() as uow:
            with pytest.raises(ValidationError):
                SeasonRepository(uow.session).upsert_season("2023", "")

    def test_unique_constraint_backs_natural_key(self, store, season):
        """Bypassing the upsert with a raw duplicate insert fails."""
        with pytest.raises(TransactionError) as exc_info:
            with store.unit_of_work() as uow:
                uow.session.add(Team(team_id="dup", season_id=season.id, name="One"))
                uow.session.add(Team(team_id="dup", season_id=season.id, name="Two"))
                uow.session.flush()

        assert isinstance(exc_info.value.__cause__, IntegrityError)


class TestEntityRepositories:
    """Entity-specific helpers."""

    def test_innings_to_outs(self):
        """Box-score innings convert to outs."""
        assert innings_to_outs("6.1") == 19
        assert innings_to_outs("7.2") == 23
        assert innings_to_outs("9") == 27
        assert innings_to_outs("0.0") == 0
        assert innings_to_outs(None) == 0
        assert innings_to_outs("") == 0

    def test_player_daily_stat_derives_outs(self, store, season, teams):
        """ip_outs is filled in from innings_pitched."""
        with store.unit_of_work() as uow:
            row = PlayerDailyStatRepository(uow.session).upsert_stat(
                date(2023, 5, 10), "TmP_tmA", teams["tmA"].id, season.id,
                period_number=5, position_played="TmP", active=True, innings_pitched="6.1", k=7,
            )

        assert row.ip_outs == 19
        assert row.k == 7
        assert row.ab == 0

    def test_player_upsert_normalizes_name(self, store):
        """Canonical players get a normalized name for matching."""
        with store.unit_of_work() as uow:
            player = PlayerRepository(uow.session).upsert_player(660670, "Ronald Acuña Jr.")

        assert player.normalized_full_name == "ronald acuna"

    def test_name_prefix_escapes_wildcards(self, store, players):
        """LIKE wildcards in the candidate are matched literally."""
        with store.unit_of_work() as uow:
            repo = PlayerRepository(uow.session)
            assert repo.find_by_name_prefix("mike").id == 545361
            assert repo.find_by_name_prefix("m_ke") is None
            assert repo.find_by_name_prefix("%") is None

    def test_schedule_orders_regular_season_before_playoffs(self, store, season, teams):
        """Regular-season periods sort numerically and come before playoff periods."""
        a, b = teams["tmA"].id, teams["tmB"].id
        with store.unit_of_work() as uow:
            repo = MatchupRepository(uow.session)
            repo.upsert_matchup(season.id, "Playoff-2", a, b, period_type=PeriodType.PLAYOFF.value)
            repo.upsert_matchup(season.id, "10", a, b)
            repo.upsert_matchup(season.id, "Playoff-1", a, b, period_type=PeriodType.PLAYOFF.value)
            repo.upsert_matchup(season.id, "2", a, b)

            periods = [m.period_number for m in repo.list_by_season(season.id)]

        assert periods == ["2", "10", "Playoff-1", "Playoff-2"]

    def test_matchup_keeps_date_range(self, store, season, teams):
        """A later scrape without a date range keeps the stored one."""
        a, b = teams["tmA"].id, teams["tmB"].id
        with store.unit_of_work() as uow:
            repo = MatchupRepository(uow.session)
            repo.upsert_matchup(season.id, "5", a, b, date_range="May 8 - May 14")
            matchup = repo.upsert_matchup(season.id, "5", a, b)

            assert matchup.date_range == "May 8 - May 14"

    def test_delete_team_period(self, store, season, teams):
        """Deleting one team-period leaves other periods alone."""
        team_id = teams["tmA"].id
        with store.unit_of_work() as uow:
            repo = RosterRepository(uow.session)
            repo.upsert_entry(season.id, team_id, 5, "C", 1, "Will Smith")
            repo.upsert_entry(season.id, team_id, 5, "1B", 1, "Paul Goldschmidt")
            repo.upsert_entry(season.id, team_id, 6, "C", 1, "Will Smith")

            assert repo.delete_team_period(team_id, 5) == 2
            assert len(repo.list_team_period(team_id, 5)) == 0
            assert len(repo.list_team_period(team_id, 6)) == 1


def _team(uow, season):
    return TeamRepository(uow.session).upsert_team("tmZ", season.id, "Zeta")
