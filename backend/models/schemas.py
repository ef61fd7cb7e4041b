from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from repositories.db_models import ReportReason, ReportStatus, ResolutionAction


class ApiModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Auth
class TokenData(BaseModel):
    user_id: Optional[str] = None


# User / Post summaries
class UserSummary(ApiModel):
    id: str
    username: str
    full_name: str


class AuthorSummary(UserSummary):
    """Post author as shown to moderators."""

    is_banned: bool


class PostSummary(ApiModel):
    id: str
    title: str
    type: str
    author: Optional[AuthorSummary] = None


# ============================================================================
# Report Schemas
# ============================================================================


class ReportCreate(ApiModel):
    """Schema for filing a report."""

    # Optional here so a missing id gets the domain message, not a schema error
    post_id: Optional[str] = None
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=1000)


class ReportResolve(ApiModel):
    """Schema for an admin decision on a report."""

    action: ResolutionAction
    reason: Optional[str] = Field(None, max_length=500)
    duration_days: Optional[int] = Field(
        None,
        ge=1,
        le=3650,
        description="Ban length in days for action=ban; omit for the reason-based default",
    )


class ReportResponse(ApiModel):
    """Schema for report response."""

    id: str
    post_id: str
    reported_by_id: str
    reason: ReportReason
    description: Optional[str] = None
    status: ReportStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    post: Optional[PostSummary] = None
    reported_by: Optional[UserSummary] = None


class ReportQueueItem(ReportResponse):
    """Report in the admin queue, with the post's active report count."""

    active_report_count: int = 0
    needs_review: bool = False


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ReportQueueResponse(ApiModel):
    reports: List[ReportQueueItem]
    pagination: Pagination


class ReportCheckResponse(ApiModel):
    reported: bool


class ActiveReportCountResponse(ApiModel):
    post_id: str
    active_report_count: int
    needs_review: bool
