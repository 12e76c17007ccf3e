"""Shared pytest fixtures for fantrax_pipeline tests."""
import sys
from pathlib import Path
from typing import Dict, Generator

import pytest
from sqlalchemy.orm import Session

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fantrax_pipeline.core.database import Store
from fantrax_pipeline.models import Season, Team
from fantrax_pipeline.repositories import (
    MatchupRepository,
    MlbTeamRepository,
    PlayerRepository,
    SeasonRepository,
    TeamRepository,
)

LEAGUE_ID = "abc123xyz"


@pytest.fixture(scope="function")
def store() -> Generator[Store, None, None]:
    """Fresh in-memory store with the schema created."""
    store = Store("sqlite:///:memory:", echo=False)
    store.create_all()

    yield store

    store.close()


@pytest.fixture(scope="function")
def session(store: Store) -> Generator[Session, None, None]:
    """Bare session on the test store, for reading back what a test wrote."""
    session = store.session()

    yield session

    session.close()


@pytest.fixture
def season(store: Store) -> Season:
    """The 2023 season."""
    with store.unit_of_work() as uow:
        return SeasonRepository(uow.session).upsert_season("2023", LEAGUE_ID, "2023 Season")


@pytest.fixture
def teams(store: Store, season: Season) -> Dict[str, Team]:
    """Four teams, keyed by platform team id."""
    names = {
        "tmA": "Moonshots",
        "tmB": "Bullpen Bandits",
        "tmC": "Curveball Crew",
        "tmD": "Dingers",
    }
    with store.unit_of_work() as uow:
        repo = TeamRepository(uow.session)
        return {team_id: repo.upsert_team(team_id, season.id, name) for team_id, name in names.items()}


@pytest.fixture
def schedule(store: Store, season: Season, teams: Dict[str, Team]):
    """Period 5: A at B and C at D."""
    with store.unit_of_work() as uow:
        repo = MatchupRepository(uow.session)
        return [
            repo.upsert_matchup(season.id, "5", teams["tmA"].id, teams["tmB"].id, matchup_id="m-5-1"),
            repo.upsert_matchup(season.id, "5", teams["tmC"].id, teams["tmD"].id, matchup_id="m-5-2"),
        ]


@pytest.fixture
def players(store: Store):
    """A handful of canonical MLB players."""
    rows = [
        (545361, "Mike Trout"),
        (660670, "Ronald Acuña Jr."),
        (502671, "Paul Goldschmidt"),
        (669257, "Will Smith"),
    ]
    with store.unit_of_work() as uow:
        repo = PlayerRepository(uow.session)
        return [repo.upsert_player(player_id, name) for player_id, name in rows]


@pytest.fixture
def mlb_teams(store: Store):
    """A few MLB clubs with their short names."""
    rows = [
        (108, "Los Angeles Angels", "LAA", "LA Angels"),
        (119, "Los Angeles Dodgers", "LAD", "LA Dodgers"),
        (147, "New York Yankees", "NYY", "NY Yankees"),
        (138, "St. Louis Cardinals", "STL", "St. Louis"),
    ]
    with store.unit_of_work() as uow:
        repo = MlbTeamRepository(uow.session)
        return [repo.upsert_team(*row) for row in rows]
