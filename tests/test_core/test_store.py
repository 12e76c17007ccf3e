"""Tests for the store, units of work and structured logging."""
import io
import json
import logging

import pytest

from fantrax_pipeline.core.config import Settings
from fantrax_pipeline.core.database import Store
from fantrax_pipeline.core.exceptions import RowError, TransactionError, UnresolvedReferenceError
from fantrax_pipeline.core.logging import JSONFormatter, configure_logging, get_run_id, run_context
from fantrax_pipeline.models import Season
from fantrax_pipeline.repositories import SeasonRepository


class TestStore:
    """Store lifecycle and transaction scoping."""

    def test_open_is_idempotent(self):
        """Opening twice keeps the same engine."""
        store = Store("sqlite:///:memory:", echo=False)
        engine = store.open().engine

        assert store.open().engine is engine
        store.close()
        assert store.engine is None

    def test_file_database_creates_parent_directory(self, tmp_path):
        """A file URL in a missing directory works."""
        path = tmp_path / "nested" / "fantrax.db"
        with Store(f"sqlite:///{path}", echo=False) as store:
            store.create_all()

        assert path.exists()

    def test_foreign_keys_are_enforced(self, store):
        """SQLite foreign keys are switched on."""
        with store.unit_of_work() as uow:
            value = uow.session.connection().exec_driver_sql("PRAGMA foreign_keys").scalar()

        assert value == 1

    def test_unit_of_work_commits(self, store):
        """A clean exit commits."""
        with store.unit_of_work() as uow:
            SeasonRepository(uow.session).upsert_season("2023", "lg1")

        with store.unit_of_work() as uow:
            assert uow.session.query(Season).count() == 1

    def test_unit_of_work_rolls_back_on_error(self, store):
        """An exception rolls back and propagates."""
        with pytest.raises(UnresolvedReferenceError):
            with store.unit_of_work() as uow:
                SeasonRepository(uow.session).upsert_season("2023", "lg1")
                raise UnresolvedReferenceError("Team", {"team_id": "x"})

        with store.unit_of_work() as uow:
            assert uow.session.query(Season).count() == 0

    def test_joined_unit_does_not_commit_early(self, store):
        """An inner unit that joins the outer one leaves commit to the owner."""
        with pytest.raises(RuntimeError):
            with store.unit_of_work() as outer:
                with store.unit_of_work(outer) as inner:
                    assert inner is outer
                    SeasonRepository(inner.session).upsert_season("2023", "lg1")
                raise RuntimeError("abort")

        with store.unit_of_work() as uow:
            assert uow.session.query(Season).count() == 0

    def test_finished_unit_is_not_joined(self, store):
        """A closed unit of work is not reused."""
        with store.unit_of_work() as first:
            pass

        assert first.active is False
        with store.unit_of_work(first) as second:
            assert second is not first

    def test_savepoint_rolls_back_only_its_block(self, store):
        """Work inside a failed savepoint is undone; the rest commits."""
        with store.unit_of_work() as uow:
            SeasonRepository(uow.session).upsert_season("2022", "lg0")
            with pytest.raises(ValueError):
                with uow.savepoint():
                    SeasonRepository(uow.session).upsert_season("2023", "lg1")
                    raise ValueError("row failed")

        with store.unit_of_work() as uow:
            assert [s.league_id for s in uow.session.query(Season).all()] == ["lg0"]

    def test_database_error_becomes_transaction_error(self, store):
        """SQLAlchemy errors escaping a unit are wrapped."""
        with pytest.raises(TransactionError):
            with store.unit_of_work() as uow:
                uow.session.connection().exec_driver_sql("SELECT * FROM no_such_table")


class TestSettings:
    """Configuration defaults."""

    def test_defaults(self, monkeypatch):
        """Defaults point at a local SQLite file and the TmP code."""
        for name in ("DATABASE_URL", "TEAM_PITCHING_CODE", "PITCHING_STAFF_FUZZY_THRESHOLD"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.is_sqlite()
        assert settings.TEAM_PITCHING_CODE == "TmP"
        assert settings.PITCHING_STAFF_FUZZY_THRESHOLD == 90

    def test_environment_override(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/fantrax")
        monkeypatch.setenv("TEAM_PITCHING_CODE", "TP")

        settings = Settings(_env_file=None)

        assert not settings.is_sqlite()
        assert settings.TEAM_PITCHING_CODE == "TP"


class TestLogging:
    """Structured logging with run ids."""

    def test_json_lines_carry_run_id(self):
        """Every line written inside a run context has its run id."""
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        configure_logging(level="INFO", json_output=True, handler=handler)

        with run_context("run-123"):
            logging.getLogger("fantrax_pipeline.test").info("reconciled")

        payload = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert payload["message"] == "reconciled"
        assert payload["run_id"] == "run-123"
        assert payload["level"] == "INFO"

    def test_nested_run_context_keeps_outer_id(self):
        """An inner context logs under the outer run id."""
        with run_context("outer") as outer:
            with run_context() as inner:
                assert inner == outer == "outer"
        assert get_run_id() == ""

    def test_json_formatter_includes_extra(self):
        """Extra fields are nested under 'extra'."""
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "skipped %s", ("row",), None)
        record.season_id = 7

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "skipped row"
        assert payload["extra"]["season_id"] == 7


class TestRowError:
    """RowError records."""

    def test_from_exception(self):
        """The exception class and message are captured with the record."""
        error = RowError.from_exception(3, {"teamName": "X"}, UnresolvedReferenceError("Team", {"team_id": "x"}))

        assert error.index == 3
        assert error.error_type == "UnresolvedReferenceError"
        assert "team_id='x'" in error.reason
        assert error.record == {"teamName": "X"}
