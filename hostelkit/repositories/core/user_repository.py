# hostelkit/repositories/core/user_repository.py
from sqlalchemy.orm import Session

from hostelkit.models.core import User
from hostelkit.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for login accounts."""

    def __init__(self, session: Session):
        super().__init__(User, session)

    def username_taken(self, username: str) -> bool:
        return self.exists({"username": username})
