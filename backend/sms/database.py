import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from sms.store import SqlStore

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sms.db")

_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine for ``database_url``.

    SQLite URLs get ``check_same_thread=False`` (the service may be called from
    several threads) and foreign key enforcement. Extra keyword arguments are
    passed through to ``create_engine`` (e.g. ``poolclass`` for tests).
    """
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}

    if is_sqlite and database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.replace("sqlite:///", "", 1)
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    new_engine = create_engine(database_url, echo=_echo, connect_args=connect_args, **kwargs)
    if is_sqlite:
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


engine: Engine = build_engine(DATABASE_URL)


def create_store(database_url: Optional[str] = None) -> SqlStore:
    """
    Build a SqlStore on ``database_url``, or on the configured engine when omitted.

    A store built for an explicit URL gets its own engine, owned by the caller:
    call ``store.engine.dispose()`` when done with it.
    """
    if database_url is None:
        return SqlStore(engine)
    return SqlStore(build_engine(database_url))


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from sms.models.student import Student  # noqa: F401
    from sms.models.ticket import Ticket  # noqa: F401

    SQLModel.metadata.create_all(engine)
