from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from backoffice.config import get_settings
from backoffice.db.models import Base

logger = structlog.get_logger(__name__)

settings = get_settings()


def connect_args_for(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def _configure_sqlite_connection(dbapi_connection, connection_record):
    if not type(dbapi_connection).__module__.startswith("sqlite3"):
        return
    # built-in lower() only folds ASCII
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if get_settings().SQLITE_FOREIGN_KEYS:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args_for(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(bind=bind)
    logger.info("database_initialized", tables=sorted(Base.metadata.tables))


def get_db() -> Iterator[Session]:
    """Request-scoped session for FastAPI dependencies."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run one atomic unit of work on ``db``.

    Commits when the block finishes, rolls back and re-raises on any error,
    so a parent row and its cascaded children are written all or nothing.
    A unit of work opened inside another one joins it: only the outermost
    block commits or rolls back.
    """
    if db.info.get("unit_of_work"):
        yield db
        return

    db.info["unit_of_work"] = True
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.info.pop("unit_of_work", None)
