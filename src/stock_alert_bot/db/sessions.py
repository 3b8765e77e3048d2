"""Database engine and session management."""
import functools
import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from stock_alert_bot.db.models import (  # noqa: F401  # pylint: disable=unused-import
    Position, User, WatchlistEntry)
from stock_alert_bot.exceptions import UnavailableError

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for DATABASE_URL.

    SQLite is allowed for local runs; connections may be used from worker threads.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """Yield a database session; commits on success, rolls back on error."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call on startup (idempotent for existing tables)."""
    SQLModel.metadata.create_all(engine)


def upsert_statement(engine: Engine, table):
    """Return a dialect INSERT that supports ON CONFLICT (PostgreSQL, SQLite)."""
    dialect = engine.dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Upserts are not supported on {dialect}")
    return insert(table)


def store_errors(func):
    """Translate driver/engine failures into UnavailableError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.warning("Store failure in %s: %s", func.__qualname__, e)
            raise UnavailableError("Storage is unavailable") from e

    return wrapper
