"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Users and posts belong to the wider platform; the moderation workflow reads
posts and only writes the ban fields of users. Reports are owned here.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class ReportReason(str, enum.Enum):
    """Why a resident reported a post."""

    SPAM = "SPAM"
    HARASSMENT = "HARASSMENT"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT"
    FAKE_NEWS = "FAKE_NEWS"
    SCAM = "SCAM"
    OTHER = "OTHER"


class ReportStatus(str, enum.Enum):
    """
    Report lifecycle.

    PENDING -> RESOLVED | DISMISSED. REVIEWED exists for data imported from
    other tools; nothing in this service produces it.
    """

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


ACTIVE_REPORT_STATUSES = (ReportStatus.PENDING, ReportStatus.REVIEWED)


class ResolutionAction(str, enum.Enum):
    """Decision an admin takes on a pending report."""

    WARN = "warn"
    BAN = "ban"
    DISMISS = "dismiss"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Sanction state (written only by SanctionService)
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ban_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ban_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )  # NULL = permanent

    posts: Mapped[List["Post"]] = relationship("Post", back_populates="author")


class Post(Base):
    """A reportable content item (post, marketplace listing, job, service)."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(50), default="GENERAL", nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    author: Mapped["User"] = relationship("User", back_populates="posts")


# ============================================================================
# Moderation Models
# ============================================================================


class Report(Base):
    """
    A resident's report against a post.

    Unique per (post_id, reported_by_id). post_id carries no foreign key so
    the report history outlives the content it points at.
    """

    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint(
            "post_id",
            "reported_by_id",
            name="uq_report_post_reporter",
        ),
        Index("ix_reports_post", "post_id"),
        Index("ix_reports_status", "status"),
        Index("ix_reports_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    post_id: Mapped[str] = mapped_column(String(36), nullable=False)
    reported_by_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[ReportReason] = mapped_column(Enum(ReportReason), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )

    post: Mapped[Optional["Post"]] = relationship(
        "Post",
        primaryjoin="foreign(Report.post_id) == Post.id",
        viewonly=True,
    )
    reported_by: Mapped["User"] = relationship("User", foreign_keys=[reported_by_id])
    reviewer: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[reviewed_by]
    )
