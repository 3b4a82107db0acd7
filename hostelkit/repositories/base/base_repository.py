"""
Base repository with standardized CRUD operations.

Repositories wrap a single Session and never commit; the service layer
owns transaction boundaries through UnitOfWork.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hostelkit.models.base import BaseModel

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing CRUD helpers for one model.
    """

    def __init__(self, model: Type[ModelType], session: Session):
        self.model = model
        self.session = session

    # ==================== Read Operations ====================

    def get(self, entity_id: Any) -> Optional[ModelType]:
        """Fetch an entity by primary key."""
        if entity_id is None:
            return None
        return self.session.get(self.model, str(entity_id))

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = select(func.count(self.model.id))
        for field, value in (filters or {}).items():
            stmt = stmt.where(getattr(self.model, field) == value)
        return self.session.execute(stmt).scalar() or 0

    def exists(self, filters: Dict[str, Any]) -> bool:
        return self.count(filters) > 0

    # ==================== Write Operations ====================

    def create(self, data: Dict[str, Any]) -> ModelType:
        """Add a new entity and flush so database defaults are assigned."""
        entity = self.model(**data)
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, entity: ModelType, values: Dict[str, Any]) -> ModelType:
        for key, value in values.items():
            setattr(entity, key, value)
        self.session.flush()
        return entity

    def delete(self, entity: ModelType) -> None:
        self.session.delete(entity)
        self.session.flush()
