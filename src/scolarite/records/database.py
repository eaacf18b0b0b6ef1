"""SQLite engine and unit of work for the Record Store."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scolarite.records.models import Base
from scolarite.records.store import RecordStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection, Engine

IN_MEMORY = ":memory:"
BUSY_TIMEOUT_SECONDS = 30
READONLY_OPTION = "scolarite_readonly"


def _configure_sqlite(engine: Engine) -> None:
    """Enable WAL and foreign keys, and choose how each transaction begins.

    The driver's own transaction handling is switched off so that the
    "begin" hook below decides how transactions start. Writing units of work
    open with BEGIN IMMEDIATE, which takes the write lock up front, so two of
    them never interleave their check-then-write steps. Read-only units of
    work use a deferred BEGIN and read a WAL snapshot without waiting on
    writers.
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection: object, _connection_record: object) -> None:
        dbapi_connection.isolation_level = None  # type: ignore[attr-defined]
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn: Connection) -> None:
        if conn.get_execution_options().get(READONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Lazily created SQLite engine plus the ``transaction()`` unit of work.

    ``Database(":memory:")`` keeps a single shared connection so that tests
    and the API test client see the same data from any thread. That mode is
    single-writer only: units of work must not overlap across threads, since
    they would all begin on the same connection. Use a file database for
    concurrent access.
    """

    def __init__(self, db_path: str = "scolarite.db") -> None:
        self.db_path = db_path
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
            _configure_sqlite(self._engine)
        return self._engine

    def _create_engine(self) -> Engine:
        if self.db_path == IN_MEMORY:
            return create_engine(
                f"sqlite:///{IN_MEMORY}",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT_SECONDS},
        )

    def _session(self) -> Session:
        if self._sessions is None:
            # Records stay readable after commit; services return them to callers
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions()

    def create_tables(self) -> None:
        """Create missing tables. Existing tables and their rows are left alone."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def transaction(self, readonly: bool = False) -> Iterator[RecordStore]:
        """Open a unit of work.

        Everything done through the yielded store is committed together when
        the block exits normally, and rolled back if it raises.

        Args:
            readonly: Begin without taking the write lock. For queries only.

        Yields:
            A RecordStore bound to the transaction's session.
        """
        session = self._session()
        if readonly:
            session.connection(execution_options={READONLY_OPTION: True})
        try:
            yield RecordStore(session)
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def is_wal_mode(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def close(self) -> None:
        """Dispose of the engine. The next use opens a fresh one."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessions = None
