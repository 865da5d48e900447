"""SQLite engine and session scope for the key-value store.

The engine is created on first use so that importing this module never
touches the disk.  ``configure_engine`` swaps in another URL (tests use
``sqlite:///:memory:``).
"""

from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..paths import app_data_dir
from .models import Base

DB_FILENAME = "worksession.db"

_engine: Engine | None = None
_SessionFactory: sessionmaker | None = None


def database_url() -> str:
    """URL of the on-disk database, creating its directory if needed."""
    data_dir = app_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{data_dir / DB_FILENAME}"


def _create(url: str) -> Engine:
    engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    if ":memory:" not in url:
        @event.listens_for(engine, "connect")
        def _set_pragmas(dbapi_conn, _record):
            # A write cut short by a crash must leave the previous record readable
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()
    return engine


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _create(database_url())
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the store at *url*, dropping any previous engine."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = _create(url)


def init_db() -> None:
    """Create the ``kv_store`` table if it is missing."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session():
    """Yield a session; commit on success, roll back and re-raise on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
