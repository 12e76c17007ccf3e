"""Tests for IdentityResolver."""
import pytest

from fantrax_pipeline.core.exceptions import UnresolvedReferenceError, ValidationError
from fantrax_pipeline.services.sync import IdentityResolver


class TestIdentityResolver:
    """External natural keys to internal ids."""

    # Seasons and Teams
    # ─────────────────────────────────────────────────────────────

    def test_resolve_season(self, store, season):
        """A known league id resolves to its season."""
        with store.unit_of_work() as uow:
            assert IdentityResolver(uow.session).resolve_season(season.league_id).id == season.id

    def test_unknown_season_raises(self, store):
        """An unknown league id is an unresolved reference."""
        with store.unit_of_work() as uow:
            with pytest.raises(UnresolvedReferenceError) as exc_info:
                IdentityResolver(uow.session).resolve_season("nope")

        assert exc_info.value.entity == "Season"
        assert exc_info.value.key == {"league_id": "nope"}

    def test_resolve_existing_team(self, store, season, teams):
        """An existing team resolves without a name."""
        with store.unit_of_work() as uow:
            resolver = IdentityResolver(uow.session)
            assert resolver.resolve_team("tmA", season.id).id == teams["tmA"].id
            # memoized lookup returns the same row
            assert resolver.resolve_team("tmA", season.id).id == teams["tmA"].id

    def test_unknown_team_without_name_raises(self, store, season):
        """A team cannot be created without a display name."""
        with store.unit_of_work() as uow:
            with pytest.raises(UnresolvedReferenceError):
                IdentityResolver(uow.session).resolve_team("tmX", season.id)

    def test_unknown_team_with_name_is_created(self, store, season):
        """A display name lets the resolver create the team."""
        with store.unit_of_work() as uow:
            team = IdentityResolver(uow.session).resolve_team("tmX", season.id, "Expansion")

        assert team.id is not None
        assert team.name == "Expansion"

    def test_refresh_updates_existing_team(self, store, season, teams):
        """With refresh, an existing team takes the scraped name and icon."""
        with store.unit_of_work() as uow:
            team = IdentityResolver(uow.session).resolve_team(
                "tmA", season.id, "Moonshots 2.0", "https://img/a.png", refresh=True
            )

        assert team.id == teams["tmA"].id
        assert team.name == "Moonshots 2.0"
        assert team.icon_url == "https://img/a.png"

    def test_missing_team_id_is_validation_error(self, store, season):
        """An empty team id never reaches the database."""
        with store.unit_of_work() as uow:
            with pytest.raises(ValidationError):
                IdentityResolver(uow.session).resolve_team("", season.id, "Nobody")

    # MLB Reference Data
    # ─────────────────────────────────────────────────────────────

    def test_resolve_player_id_exact_only(self, store, players):
        """Players resolve on exact normalized name and never by prefix."""
        with store.unit_of_work() as uow:
            resolver = IdentityResolver(uow.session)
            assert resolver.resolve_player_id("Mike Trout") == 545361
            assert resolver.resolve_player_id("mike trout") == 545361
            assert resolver.resolve_player_id("Ronald Acuña Jr.") == 660670
            assert resolver.resolve_player_id("Mike") is None
            assert resolver.resolve_player_id("") is None

    def test_resolve_mlb_team_id(self, store, mlb_teams):
        """MLB teams resolve by abbreviation, full name or short name."""
        with store.unit_of_work() as uow:
            resolver = IdentityResolver(uow.session)
            assert resolver.resolve_mlb_team_id("LAD") == 119
            assert resolver.resolve_mlb_team_id("new york yankees") == 147
            assert resolver.resolve_mlb_team_id("LA Angels") == 108
            assert resolver.resolve_mlb_team_id("Seattle Mariners") is None
