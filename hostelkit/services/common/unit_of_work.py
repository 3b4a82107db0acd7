# hostelkit/services/common/unit_of_work.py
"""
Transaction scope shared by the services.

A UnitOfWork wraps one Session: it commits when the block exits cleanly
and rolls back when it raises. Workflows spanning several records that
must change together (a placement and its room counter) run in one
UnitOfWork; longer workflows such as admission chain several and undo
the earlier ones explicitly.
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hostelkit.core.exceptions import TransactionError
from hostelkit.core.logging import get_logger
from hostelkit.repositories.base import BaseRepository

logger = get_logger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)

SessionFactory = Callable[[], Session]


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    >>> with UnitOfWork(session_factory) as uow:
    ...     uow.get_repo(RoomRepository).adjust_occupied(room_id, 1)

    IntegrityError from flush or commit reaches the caller untouched so it
    can become a domain error (e.g. a taken bed); any other database error
    is raised as TransactionError.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._done = False
        self._repos: Dict[Type[BaseRepository], BaseRepository] = {}

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork is not reentrant")
        self.session = self._session_factory()
        self._done = False
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        try:
            if exc_type is None:
                self.commit()
            elif not self._done:
                self.session.rollback()
                self._done = True
                logger.debug(f"UnitOfWork rolled back on {exc_type.__name__}")
        finally:
            self.session.close()
            self.session = None
            self._repos.clear()
        return False

    def _require_session(self) -> Session:
        if self.session is None:
            raise RuntimeError("UnitOfWork used outside its with-block")
        return self.session

    def commit(self) -> None:
        """Commit once; later calls and calls after rollback() are no-ops."""
        session = self._require_session()
        if self._done:
            return
        self._done = True
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            logger.error(f"Commit failed: {exc}")
            session.rollback()
            raise TransactionError("Failed to commit transaction", exc) from exc

    def rollback(self) -> None:
        session = self._require_session()
        if not self._done:
            session.rollback()
            self._done = True

    def flush(self) -> None:
        session = self._require_session()
        try:
            session.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.error(f"Flush failed: {exc}")
            raise TransactionError("Failed to flush changes", exc) from exc

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """Repository bound to this unit's session, created once per unit."""
        session = self._require_session()
        if repo_cls not in self._repos:
            self._repos[repo_cls] = repo_cls(session)
        return self._repos[repo_cls]  # type: ignore[return-value]
