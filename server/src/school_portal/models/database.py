"""Database configuration and session helpers"""

import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlmodel import Session

from school_portal.config import config

# Database URL from config
DATABASE_URL = config["database_url"]

# Validate DATABASE_URL exists
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Make sure to set DATABASE_URL in the deployment dashboard or local .env file."
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # Registrations rely on ON DELETE CASCADE, which SQLite ignores by default
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, **kwargs) -> Engine:
    """Create an engine for the given URL, enabling FK enforcement on SQLite."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args

    db_engine = create_engine(
        url, echo=os.getenv("DEBUG", "false").lower() == "true", **kwargs
    )

    if db_engine.dialect.name == "sqlite":
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)

    return db_engine


# Create engine
engine = create_db_engine(DATABASE_URL)


def get_session() -> Session:
    """Open a standalone session (background tasks, streaming endpoints)"""
    return Session(engine)


def get_db():
    """Get database session"""
    with Session(engine) as session:
        yield session
