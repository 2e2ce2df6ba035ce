"""Catalog database engine and sessions: SQLite for dev/tests, PostgreSQL in production."""
from collections.abc import Generator, Iterator
from contextlib import contextmanager
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL

# Refuse to run the test suite against anything that looks like the real catalog.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "catalog.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against the catalog database. Set TESTING_DATABASE_URL to sqlite:///:memory: "
            "(or another test URL containing :memory: or 'test')."
        )

_is_sqlite = DATABASE_URL.startswith("sqlite")
_engine_kw: dict = {"echo": False}
if _is_sqlite:
    _engine_kw["connect_args"] = {"check_same_thread": False}
    # In-memory SQLite: one shared connection, otherwise every session sees an empty DB.
    if ":memory:" in DATABASE_URL:
        _engine_kw["poolclass"] = StaticPool
else:
    _engine_kw["pool_pre_ping"] = True

engine = create_engine(DATABASE_URL, **_engine_kw)

if _is_sqlite:

    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_conn, connection_record):
        # pysqlite must not issue its own BEGIN, otherwise SAVEPOINTs do not nest.
        dbapi_conn.isolation_level = None
        # Review rows rely on ON DELETE CASCADE from location.
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yield a DB session and close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request (startup seeding, scripts)."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
