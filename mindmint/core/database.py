"""
Database configuration and session management for SQLAlchemy.

The local store and the cloud mirror share one declarative schema; each gets
its own engine and session factory.
"""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Declarative Base
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves foreign key enforcement off per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, connect_timeout: Optional[int] = None) -> Engine:
    """
    Creates an engine for a store URL.

    Args:
        url (str): SQLAlchemy database URL.
        connect_timeout (Optional[int]): Seconds to wait for a server connection.
            Ignored for SQLite.

    Returns:
        Engine: Configured SQLAlchemy engine.
    """
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    connect_args = {}
    if connect_timeout is not None:
        connect_args["connect_timeout"] = connect_timeout
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Import all models to register them with the Base metadata
    import mindmint.users.models  # noqa: F401
    import mindmint.journals.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
