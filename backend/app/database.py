import logging
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine

from .models import Base

log = logging.getLogger(__name__)

# The ledger database shared by every request
_engine: Engine | None = None
_session_factory: sessionmaker | None = None
_database_path: Path | None = None


@event.listens_for(Engine, "connect")
def _sqlite_on_connect(dbapi_connection, connection_record):
    """Foreign keys are off by default in SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def open_database(db_path: Path) -> None:
    """
    Open the ledger at db_path, creating the file, its directory and any
    missing tables. An already open ledger is closed first.
    """
    global _engine, _session_factory, _database_path

    if _engine is not None:
        close_database()

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)

    _engine = engine
    _session_factory = sessionmaker(bind=engine)
    _database_path = db_path
    log.info("Opened ledger database %s", db_path)


def close_database() -> None:
    global _engine, _session_factory, _database_path

    if _engine is None:
        return
    _engine.dispose()
    log.info("Closed ledger database %s", _database_path)
    _engine = None
    _session_factory = None
    _database_path = None


def get_session() -> Session:
    """New session on the open ledger."""
    if _session_factory is None:
        raise RuntimeError("Ledger database is not open")
    return _session_factory()


def get_db():
    """
    FastAPI dependency: one session per request.

    Committed when the endpoint returns, rolled back if it raises, so the
    writes of an import or a reconciliation land together or not at all.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def is_database_open() -> bool:
    return _engine is not None


def database_path() -> Path | None:
    """Path of the open ledger, if any."""
    return _database_path
