"""
Repository for user operations.
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import User


class UserRepository(BaseRepository[User]):
    """Repository for user data access."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_username(self, username: str) -> User | None:
        """
        Get user by username.

        Args:
            username: Unique username

        Returns:
            User if found, None otherwise
        """
        return self.db.query(User).filter(User.username == username).first()
