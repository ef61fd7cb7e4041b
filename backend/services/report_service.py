"""
Service for filing and looking up reports.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpers.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    build_pagination,
    page_to_offset,
)
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    DuplicateReportException,
    InvalidReportReasonException,
    MissingPostIdException,
    PostNotFoundException,
    ReportNotFoundException,
)
from repositories.db_models import Report, ReportReason, ReportStatus
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from services.report_aggregator import ReportAggregator


class ReportService:
    """Service for report submission and lookups."""

    @staticmethod
    def file_report(
        db: Session,
        reporter_id: str,
        post_id: Optional[str],
        reason: ReportReason,
        description: Optional[str] = None,
    ) -> Report:
        """
        File a report against a post.

        Args:
            db: Database session
            reporter_id: ID of the reporting user
            post_id: ID of the reported post
            reason: Report category
            description: Optional free-text context

        Returns:
            Created report with post and reporter loaded

        Raises:
            MissingPostIdException: If post_id is empty
            PostNotFoundException: If post not found
            InvalidReportReasonException: If reason is not a known category
            DuplicateReportException: If the user already reported this post
        """
        if not post_id:
            raise MissingPostIdException()

        try:
            reason = ReportReason(reason)
        except ValueError as exc:
            raise InvalidReportReasonException(reason) from exc

        report_repo = ReportRepository(db)

        if not PostRepository(db).exists(post_id):
            raise PostNotFoundException(post_id)

        if report_repo.get_by_post_and_reporter(post_id, reporter_id):
            raise DuplicateReportException()

        report = Report(
            post_id=post_id,
            reported_by_id=reporter_id,
            reason=reason,
            description=sanitize_plain_text(description),
            status=ReportStatus.PENDING,
        )
        report_repo.add(report)
        try:
            report_repo.commit()
        except IntegrityError as exc:
            # A concurrent request from the same reporter got there first
            report_repo.rollback()
            raise DuplicateReportException() from exc

        logger.info(
            f"Report {report.id} filed against post {post_id} ({report.reason.value})"
        )

        active_count = ReportAggregator.count_active_reports(db, post_id)
        if ReportAggregator.needs_review(active_count):
            logger.info(
                f"Post {post_id} has {active_count} active reports and needs review"
            )

        return ReportService.get_report(db, report.id)

    @staticmethod
    def has_reported(db: Session, reporter_id: str, post_id: str) -> bool:
        """
        Check if a user has already reported a post.

        Args:
            db: Database session
            reporter_id: ID of the user
            post_id: ID of the post

        Returns:
            True if a report exists, whatever its status
        """
        report_repo = ReportRepository(db)
        return report_repo.get_by_post_and_reporter(post_id, reporter_id) is not None

    @staticmethod
    def list_reports_for_content(db: Session, post_id: str) -> list[Report]:
        """
        Get every report against a post, newest first.

        Args:
            db: Database session
            post_id: ID of the post

        Returns:
            List of reports with reporters loaded (empty if none)
        """
        return ReportRepository(db).get_reports_for_post(post_id)

    @staticmethod
    def list_reports(
        db: Session,
        status: Optional[ReportStatus] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> tuple[list[Report], dict[str, int]]:
        """
        Get one page of the global report queue.

        Args:
            db: Database session
            status: Only include reports in this status
            page: 1-indexed page
            limit: Page size

        Returns:
            Tuple of (reports, pagination metadata)
        """
        reports, total = ReportRepository(db).get_reports_page(
            status, page_to_offset(page, limit), limit
        )
        return reports, build_pagination(page, limit, total)

    @staticmethod
    def get_report(db: Session, report_id: str) -> Report:
        """
        Get a report with its post, post author and reporter.

        Args:
            db: Database session
            report_id: ID of the report

        Returns:
            The report

        Raises:
            ReportNotFoundException: If report not found
        """
        report = ReportRepository(db).get_with_details(report_id)
        if not report:
            raise ReportNotFoundException(report_id)
        return report
