"""
Router for content report endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from authentication.policy import ModerationPolicy, get_moderation_policy
from helpers.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    PaginationLimit,
    PaginationPage,
)
from helpers.rate_limiter import limiter
from models.config import settings
from repositories.database import get_db
from services.moderation_service import ModerationService
from services.report_aggregator import ReportAggregator
from services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    response_model=schemas.ReportResponse,
    status_code=201,
)
@limiter.limit(settings.REPORT_RATE_LIMIT)
def create_report(
    request: Request,
    report_data: schemas.ReportCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.Report:
    """
    Report a post.

    One report per user per post. Rate limited per client address.

    Domain exceptions are caught by centralized exception handlers.
    """
    return ReportService.file_report(
        db=db,
        reporter_id=current_user.id,
        post_id=report_data.post_id,
        reason=report_data.reason,
        description=report_data.description,
    )


@router.get("/post/{post_id}", response_model=list[schemas.ReportResponse])
def get_reports_for_post(
    post_id: str,
    db: Session = Depends(get_db),
) -> list[db_models.Report]:
    """
    Get all reports against a post, newest first.
    """
    return ReportService.list_reports_for_content(db=db, post_id=post_id)


@router.get("/post/{post_id}/check", response_model=schemas.ReportCheckResponse)
def check_report_status(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> dict[str, bool]:
    """
    Check if current user has reported a post.

    Used to show/hide the report button in the UI.
    """
    reported = ReportService.has_reported(
        db=db, reporter_id=current_user.id, post_id=post_id
    )
    return {"reported": reported}


@router.get(
    "/post/{post_id}/active-count",
    response_model=schemas.ActiveReportCountResponse,
)
def get_active_report_count(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> dict[str, Any]:
    """
    Get the number of active (pending or reviewed) reports against a post.
    """
    active_count = ReportAggregator.count_active_reports(db, post_id)
    return {
        "post_id": post_id,
        "active_report_count": active_count,
        "needs_review": ReportAggregator.needs_review(active_count),
    }


@router.get("", response_model=schemas.ReportQueueResponse)
def get_reports(
    status: Optional[db_models.ReportStatus] = None,
    page: PaginationPage = DEFAULT_PAGE,
    limit: PaginationLimit = DEFAULT_LIMIT,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> dict[str, Any]:
    """
    Get the report queue (admin only).

    Optionally filtered by status. Each report carries the active report
    count of its post.
    """
    return ModerationService.get_moderation_queue(
        db=db, status=status, page=page, limit=limit
    )


@router.get("/{report_id}", response_model=schemas.ReportResponse)
def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.Report:
    """
    Get a single report with its post, post author and reporter (admin only).
    """
    return ReportService.get_report(db=db, report_id=report_id)


@router.put("/{report_id}/resolve", response_model=schemas.ReportResponse)
def resolve_report(
    report_id: str,
    resolution: schemas.ReportResolve,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
    policy: ModerationPolicy = Depends(get_moderation_policy),
) -> db_models.Report:
    """
    Resolve a pending report (admin only).

    - dismiss: report is dismissed
    - warn: report is resolved, no further action
    - ban: report is resolved and the post author is banned

    Domain exceptions are caught by centralized exception handlers.
    """
    return ModerationService.resolve_report(
        db=db,
        admin_id=current_user.id,
        report_id=report_id,
        action=resolution.action,
        reason=resolution.reason,
        duration_days=resolution.duration_days,
        policy=policy,
    )
