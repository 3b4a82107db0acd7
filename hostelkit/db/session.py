"""Database session management."""
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from hostelkit.config.settings import settings


def build_engine(database_url: str, echo: bool = False, poolclass: Optional[type] = None) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign keys switched on; other backends use a
    pre-pinged connection pool sized from settings.
    """
    kwargs: Dict[str, Any] = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if poolclass is not None:
            kwargs["poolclass"] = poolclass
    else:
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_OVERFLOW,
        )

    engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


engine = build_engine(settings.get_database_url(), echo=settings.DB_ECHO)

SessionLocal = build_session_factory(engine)
