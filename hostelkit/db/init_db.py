# hostelkit/db/init_db.py
"""Database initialization utilities."""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from hostelkit.core.logging import get_logger
from hostelkit.models import Base

logger = get_logger(__name__)


def _resolve(bind: Optional[Engine]) -> Engine:
    if bind is not None:
        return bind
    from hostelkit.db.session import engine
    return engine


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Suitable for development and tests; production schemas are migrated.
    """
    target = _resolve(bind)
    existing_tables = inspect(target).get_table_names()
    Base.metadata.create_all(bind=target)
    logger.info(
        "Database tables ensured",
        extra={"existing_tables": len(existing_tables), "declared_tables": len(Base.metadata.tables)},
    )


def drop_db(bind: Optional[Engine] = None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Use with caution.
    """
    Base.metadata.drop_all(bind=_resolve(bind))
    logger.warning("All database tables dropped")
