"""
Service for admin moderation decisions on reports.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from authentication.policy import ModerationPolicy, default_policy
from helpers.time_utils import utc_now
from models.exceptions import (
    InvalidResolutionActionException,
    ReportAlreadyResolvedException,
    ReportNotFoundException,
)
from repositories.db_models import Report, ReportStatus, ResolutionAction
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from services.report_aggregator import ReportAggregator
from services.report_service import ReportService
from services.sanction_service import SanctionService

# Terminal status reached by each admin decision
ACTION_STATUS = {
    ResolutionAction.DISMISS: ReportStatus.DISMISSED,
    ResolutionAction.WARN: ReportStatus.RESOLVED,
    ResolutionAction.BAN: ReportStatus.RESOLVED,
}


class ModerationService:
    """Service for resolving reports and building the admin queue."""

    @staticmethod
    def resolve_report(
        db: Session,
        admin_id: str,
        report_id: str,
        action: ResolutionAction,
        reason: Optional[str] = None,
        duration_days: Optional[int] = None,
        policy: Optional[ModerationPolicy] = None,
    ) -> Report:
        """
        Resolve a pending report.

        - dismiss: report becomes DISMISSED.
        - warn: report becomes RESOLVED; nothing else is recorded.
        - ban: report becomes RESOLVED and the post author is banned.

        The status change and the ban are committed in one transaction. If
        the post or its author no longer exists, the status change is still
        committed and the skipped ban is logged for manual follow-up.

        Args:
            db: Database session
            admin_id: ID of the resolving admin
            report_id: ID of the report
            action: Admin decision
            reason: Ban reason (only used by "ban")
            duration_days: Explicit ban length in days (only used by "ban")
            policy: Authorization policy (defaults to AdminRolePolicy)

        Returns:
            The updated report

        Raises:
            InsufficientPermissionsException: If the policy rejects admin_id
            InvalidResolutionActionException: If action is not warn, ban or dismiss
            ReportNotFoundException: If report not found
            ReportAlreadyResolvedException: If the report is no longer PENDING
            InvalidBanDurationException: If duration_days is less than 1
        """
        (policy or default_policy).ensure_can_moderate(db, admin_id)

        try:
            action = ResolutionAction(action)
        except ValueError as exc:
            raise InvalidResolutionActionException(action) from exc

        report_repo = ReportRepository(db)

        report = report_repo.get_by_id(report_id)
        if not report:
            raise ReportNotFoundException(report_id)

        if report.status != ReportStatus.PENDING:
            raise ReportAlreadyResolvedException()

        post_id = report.post_id
        new_status = ACTION_STATUS[action]

        try:
            updated = report_repo.transition_from_pending(
                report_id, new_status, admin_id, utc_now()
            )
            if updated == 0:
                # Another admin resolved it between our read and our write
                raise ReportAlreadyResolvedException()

            if action == ResolutionAction.BAN:
                ModerationService._ban_post_author(
                    db, report_id, post_id, reason, duration_days
                )

            report_repo.commit()
        except Exception:
            report_repo.rollback()
            raise

        logger.info(
            f"Report {report_id} resolved by {admin_id}: "
            f"action={action.value} status={new_status.value}"
        )

        return ReportService.get_report(db, report_id)

    @staticmethod
    def _ban_post_author(
        db: Session,
        report_id: str,
        post_id: str,
        reason: Optional[str],
        duration_days: Optional[int],
    ) -> None:
        """
        Stage a ban on the author of the reported post.

        Skips (with a warning) when the post or its author is gone.
        """
        post = PostRepository(db).get_with_author(post_id)
        if post is None or post.author is None:
            logger.warning(
                f"Report {report_id}: ban skipped, author of post {post_id} "
                f"could not be resolved"
            )
            return

        SanctionService.apply_ban(
            db, post.author.id, reason, duration_days, commit=False
        )

    @staticmethod
    def get_moderation_queue(
        db: Session,
        status: Optional[ReportStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        """
        Get the admin report queue, newest first.

        Each item is annotated with the post's active report count and
        whether it crossed the review threshold.

        Args:
            db: Database session
            status: Only include reports in this status
            page: 1-indexed page
            limit: Page size

        Returns:
            Dict with "reports" and "pagination"
        """
        reports, pagination = ReportService.list_reports(db, status, page, limit)
        counts = ReportAggregator.count_active_for_posts(
            db, [report.post_id for report in reports]
        )

        items = []
        for report in reports:
            active_count = counts.get(report.post_id, 0)
            item = schemas.ReportQueueItem.model_validate(report)
            item.active_report_count = active_count
            item.needs_review = ReportAggregator.needs_review(active_count)
            items.append(item)

        return {"reports": items, "pagination": pagination}
