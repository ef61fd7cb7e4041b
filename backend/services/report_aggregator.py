"""
Active report counts per post.

The count is a signal for moderators only: it is surfaced in the admin queue
so heavily reported posts stand out. Nothing is hidden or flagged
automatically when a post crosses the threshold.
"""

from sqlalchemy.orm import Session

from models.config import settings
from repositories.report_repository import ReportRepository


class ReportAggregator:
    """Counts PENDING and REVIEWED reports against posts."""

    @staticmethod
    def count_active_reports(db: Session, post_id: str) -> int:
        """
        Count active reports against one post.

        Args:
            db: Database session
            post_id: ID of the post

        Returns:
            Number of PENDING or REVIEWED reports
        """
        return ReportRepository(db).count_active_for_post(post_id)

    @staticmethod
    def count_active_for_posts(db: Session, post_ids: list[str]) -> dict[str, int]:
        """
        Count active reports for several posts.

        Args:
            db: Database session
            post_ids: IDs of the posts (duplicates allowed)

        Returns:
            Mapping with an entry for every requested post, 0 when it has none
        """
        unique_ids = list(dict.fromkeys(post_ids))
        counts = ReportRepository(db).count_active_by_post(unique_ids)
        return {post_id: counts.get(post_id, 0) for post_id in unique_ids}

    @staticmethod
    def needs_review(active_count: int) -> bool:
        """Return True once a post has REPORT_REVIEW_THRESHOLD active reports."""
        return active_count >= settings.REPORT_REVIEW_THRESHOLD
