"""
Repository for report operations.
"""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from repositories.db_models import (
    ACTIVE_REPORT_STATUSES,
    Post,
    Report,
    ReportStatus,
)


class ReportRepository(BaseRepository[Report]):
    """Repository for report data access."""

    def __init__(self, db: Session):
        """
        Initialize report repository.

        Args:
            db: Database session
        """
        super().__init__(Report, db)

    def get_by_post_and_reporter(self, post_id: str, reporter_id: str) -> Report | None:
        """
        Find the report a user already filed against a post.

        Args:
            post_id: ID of the reported post
            reporter_id: ID of the reporting user

        Returns:
            Existing report if found, None otherwise
        """
        return (
            self.db.query(Report)
            .filter(
                Report.post_id == post_id,
                Report.reported_by_id == reporter_id,
            )
            .first()
        )

    def get_with_details(self, report_id: str) -> Report | None:
        """
        Get a report with its post, the post author and the reporter loaded.

        Args:
            report_id: ID of the report

        Returns:
            Report if found, None otherwise
        """
        return (
            self.db.query(Report)
            .options(
                joinedload(Report.post).joinedload(Post.author),
                joinedload(Report.reported_by),
            )
            .filter(Report.id == report_id)
            .first()
        )

    def get_reports_for_post(self, post_id: str) -> list[Report]:
        """
        Get every report against a post, newest first, regardless of status.

        Args:
            post_id: ID of the post

        Returns:
            List of reports
        """
        return (
            self.db.query(Report)
            .options(joinedload(Report.reported_by))
            .filter(Report.post_id == post_id)
            .order_by(Report.created_at.desc())
            .all()
        )

    def get_reports_page(
        self,
        status: ReportStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Report], int]:
        """
        Get one page of the global report queue, newest first.

        Args:
            status: Only include reports in this status
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (reports on this page, total matching reports)
        """
        query = self.db.query(Report)
        if status is not None:
            query = query.filter(Report.status == status)

        total = query.count()
        reports = (
            query.options(
                joinedload(Report.post).joinedload(Post.author),
                joinedload(Report.reported_by),
            )
            .order_by(Report.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return reports, total

    def count_active_for_post(self, post_id: str) -> int:
        """
        Count PENDING and REVIEWED reports against a post.

        Args:
            post_id: ID of the post

        Returns:
            Number of active reports
        """
        return (
            self.db.query(func.count(Report.id))
            .filter(
                Report.post_id == post_id,
                Report.status.in_(ACTIVE_REPORT_STATUSES),
            )
            .scalar()
            or 0
        )

    def count_active_by_post(self, post_ids: list[str]) -> dict[str, int]:
        """
        Count active reports for several posts in one query.

        Args:
            post_ids: IDs of the posts

        Returns:
            Mapping of post ID to active report count (posts without active
            reports are omitted)
        """
        if not post_ids:
            return {}
        rows = (
            self.db.query(Report.post_id, func.count(Report.id))
            .filter(
                Report.post_id.in_(post_ids),
                Report.status.in_(ACTIVE_REPORT_STATUSES),
            )
            .group_by(Report.post_id)
            .all()
        )
        return {post_id: count for post_id, count in rows}

    def transition_from_pending(
        self,
        report_id: str,
        status: ReportStatus,
        reviewer_id: str,
        reviewed_at: datetime,
    ) -> int:
        """
        Move a report out of PENDING, only if it is still PENDING.

        The status check is part of the UPDATE itself, so of two concurrent
        resolutions exactly one matches a row. Does not commit.

        Args:
            report_id: ID of the report
            status: Terminal status to set
            reviewer_id: ID of the reviewing admin
            reviewed_at: Review timestamp

        Returns:
            Number of rows updated (0 or 1)
        """
        return (
            self.db.query(Report)
            .filter(
                Report.id == report_id,
                Report.status == ReportStatus.PENDING,
            )
            .update(
                {
                    Report.status: status,
                    Report.reviewed_by: reviewer_id,
                    Report.reviewed_at: reviewed_at,
                },
                synchronize_session=False,
            )
        )
