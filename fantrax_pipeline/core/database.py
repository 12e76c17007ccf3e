"""
Database handle and transaction management.

A ``Store`` is constructed explicitly and passed to the services that need it;
there is no module-level engine. Writes happen inside a ``UnitOfWork``:

    with Store("sqlite:///data/db/fantrax.db") as store:
        with store.unit_of_work() as uow:
            TeamRepository(uow.session).upsert_team(...)

A service method that receives an already-open ``UnitOfWork`` joins it instead
of beginning a new transaction, so the same method works standalone and as a
step of a larger unit (aggregation inside a per-day ingest, for example).
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from fantrax_pipeline.core.exceptions import TransactionError

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    One open transaction.

    Attributes:
        session: The session bound to the transaction
        active: False once the transaction has been committed or rolled back
    """

    def __init__(self, session: Session):
        self.session = session
        self.active = True

    @contextmanager
    def savepoint(self) -> Iterator[Session]:
        """
        Run a block inside a SAVEPOINT.

        If the block raises, only the work done inside it is rolled back and the
        exception propagates; the enclosing transaction stays usable.
        """
        with self.session.begin_nested():
            yield self.session

    def flush(self) -> None:
        self.session.flush()


class Store:
    """
    Explicit database handle.

    Lifecycle is ``open()`` / ``close()`` (or a ``with`` block), scoped to the
    process or to a test fixture.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        if url is None or echo is None:
            from fantrax_pipeline.core.config import settings
            url = url if url is not None else settings.DATABASE_URL
            echo = echo if echo is not None else settings.SQL_ECHO

        self.url = url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def open(self) -> "Store":
        """Create the engine and session factory. Calling twice is a no-op."""
        if self.engine is not None:
            return self

        if self.url.startswith("sqlite"):
            self.engine = self._create_sqlite_engine()
        else:
            self.engine = create_engine(self.url, pool_pre_ping=True, echo=self.echo)

        # Rows returned from a finished unit of work stay readable
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        logger.debug(f"Opened store {self.engine.url!r}")
        return self

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
            logger.debug(f"Closed store {self.engine.url!r}")
        self.engine = None
        self._session_factory = None

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_all(self) -> None:
        """Create any missing tables from the models."""
        from fantrax_pipeline.models import Base

        self.open()
        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def _create_sqlite_engine(self) -> Engine:
        in_memory = ":memory:" in self.url or self.url.rstrip("/") == "sqlite:"
        kwargs = {"echo": self.echo, "connect_args": {"check_same_thread": False}}
        if in_memory:
            # A single shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        else:
            database = make_url(self.url).database
            if database:
                Path(database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(self.url, **kwargs)

        # pysqlite issues its own BEGIN lazily, which breaks SAVEPOINT.
        # See: https://docs.sqlalchemy.org/en/20/dialects/sqlite.html#serializable-isolation-savepoints-transactional-ddl
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    # ========================================================================
    # Transactions
    # ========================================================================

    def session(self) -> Session:
        """Open a bare session. The caller owns commit/close."""
        self.open()
        return self._session_factory()

    @contextmanager
    def unit_of_work(self, current: Optional[UnitOfWork] = None) -> Iterator[UnitOfWork]:
        """
        Yield a unit of work, joining ``current`` when it is still active.

        A new unit commits when the block exits normally. If the block raises,
        the transaction is rolled back and the exception re-raised, with
        database errors wrapped in TransactionError. A failed commit is also
        rolled back and reported as TransactionError.
        """
        if current is not None and current.active:
            yield current
            return

        session = self.session()
        uow = UnitOfWork(session)
        try:
            yield uow
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Unit of work rolled back: {e}")
            raise TransactionError(f"Unit of work rolled back: {e}") from e
        except BaseException:
            session.rollback()
            raise
        else:
            try:
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Commit failed, unit of work rolled back: {e}")
                raise TransactionError(f"Commit failed: {e}") from e
        finally:
            uow.active = False
            session.close()
