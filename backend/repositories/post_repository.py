"""
Read access to reportable posts.
"""

from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from repositories.db_models import Post


class PostRepository(BaseRepository[Post]):
    """Repository for post lookups needed by moderation."""

    def __init__(self, db: Session):
        super().__init__(Post, db)

    def get_with_author(self, post_id: str) -> Post | None:
        """
        Get a post with its author loaded.

        Args:
            post_id: ID of the post

        Returns:
            Post if found, None otherwise
        """
        return (
            self.db.query(Post)
            .options(joinedload(Post.author))
            .filter(Post.id == post_id)
            .first()
        )

    def exists(self, post_id: str) -> bool:
        """Return True if the post exists."""
        return (
            self.db.query(Post.id).filter(Post.id == post_id).first() is not None
        )
