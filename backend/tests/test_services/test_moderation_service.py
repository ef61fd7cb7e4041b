"""
Unit tests for ModerationService.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from models.exceptions import (
    InsufficientPermissionsException,
    InvalidBanDurationException,
    InvalidResolutionActionException,
    ReportAlreadyResolvedException,
    ReportNotFoundException,
)
from repositories.db_models import (
    Post,
    Report,
    ReportReason,
    ReportStatus,
    ResolutionAction,
    User,
)
from services.moderation_service import ModerationService
from services.sanction_service import SanctionService


class AllowAllPolicy:
    """Policy that lets anyone moderate."""

    def ensure_can_moderate(self, db, actor_id):
        return None


def reload(db_session, model, id):
    db_session.expire_all()
    return db_session.get(model, id)


class TestResolveReport:
    """Tests for ModerationService.resolve_report"""

    def test_dismiss(self, db_session, admin_user, author_user, pending_report):
        """Dismiss marks the report DISMISSED and bans nobody."""
        report = ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, ResolutionAction.DISMISS
        )

        assert report.status == ReportStatus.DISMISSED
        assert report.reviewed_by == admin_user.id
        assert report.reviewed_at is not None
        assert reload(db_session, User, author_user.id).is_banned is False

    def test_warn(self, db_session, admin_user, author_user, pending_report):
        """Warn resolves the report without touching the author."""
        report = ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, "warn"
        )

        assert report.status == ReportStatus.RESOLVED
        author = reload(db_session, User, author_user.id)
        assert author.is_banned is False
        assert author.ban_reason is None

    def test_ban_permanent(self, db_session, admin_user, author_user, pending_report):
        """Ban resolves the report and permanently bans the post author."""
        report = ModerationService.resolve_report(
            db_session,
            admin_user.id,
            pending_report.id,
            ResolutionAction.BAN,
            reason="Repeated scams",
        )

        assert report.status == ReportStatus.RESOLVED
        assert report.post.author.is_banned is True
        author = reload(db_session, User, author_user.id)
        assert author.is_banned is True
        assert author.ban_reason == "Repeated scams"
        assert author.ban_expires_at is None

    def test_ban_temporary_reason(
        self, db_session, admin_user, author_user, pending_report
    ):
        """A 'temporary' reason bans the author for seven days."""
        ModerationService.resolve_report(
            db_session,
            admin_user.id,
            pending_report.id,
            ResolutionAction.BAN,
            reason="temporary ban for spam",
        )

        author = reload(db_session, User, author_user.id)
        expires_at = author.ban_expires_at.replace(tzinfo=timezone.utc)
        remaining = expires_at - datetime.now(timezone.utc)
        assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)
        assert SanctionService.is_currently_banned(author)

    def test_ban_explicit_duration(
        self, db_session, admin_user, author_user, pending_report
    ):
        """duration_days sets the ban length."""
        ModerationService.resolve_report(
            db_session,
            admin_user.id,
            pending_report.id,
            ResolutionAction.BAN,
            reason="Harassment",
            duration_days=3,
        )

        author = reload(db_session, User, author_user.id)
        expires_at = author.ban_expires_at.replace(tzinfo=timezone.utc)
        remaining = expires_at - datetime.now(timezone.utc)
        assert timedelta(days=2, hours=23) < remaining <= timedelta(days=3)

    def test_ban_default_reason(
        self, db_session, admin_user, author_user, pending_report
    ):
        """A ban without a reason stores the default reason."""
        ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, ResolutionAction.BAN
        )

        author = reload(db_session, User, author_user.id)
        assert author.ban_reason == "Violation of community guidelines"

    def test_ban_skipped_when_post_deleted(
        self, db_session, admin_user, author_user, test_post, pending_report
    ):
        """A ban on a deleted post still resolves the report."""
        db_session.delete(test_post)
        db_session.commit()

        report = ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, ResolutionAction.BAN
        )

        assert report.status == ReportStatus.RESOLVED
        assert report.post is None
        assert reload(db_session, User, author_user.id).is_banned is False

    def test_invalid_duration_rolls_back(
        self, db_session, admin_user, author_user, pending_report
    ):
        """A rejected ban leaves the report PENDING."""
        with pytest.raises(InvalidBanDurationException):
            ModerationService.resolve_report(
                db_session,
                admin_user.id,
                pending_report.id,
                ResolutionAction.BAN,
                duration_days=0,
            )

        report = reload(db_session, Report, pending_report.id)
        assert report.status == ReportStatus.PENDING
        assert report.reviewed_by is None

    def test_ban_failure_rolls_back_status(
        self, db_session, admin_user, pending_report, monkeypatch
    ):
        """Status change and ban commit together or not at all."""

        def fail(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(SanctionService, "apply_ban", fail)

        with pytest.raises(RuntimeError):
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, ResolutionAction.BAN
            )

        assert (
            reload(db_session, Report, pending_report.id).status
            == ReportStatus.PENDING
        )

    @pytest.mark.parametrize(
        "status", [ReportStatus.RESOLVED, ReportStatus.DISMISSED, ReportStatus.REVIEWED]
    )
    def test_only_pending_reports_can_be_resolved(
        self, db_session, admin_user, pending_report, status
    ):
        """Reports outside PENDING are rejected."""
        pending_report.status = status
        db_session.commit()

        with pytest.raises(ReportAlreadyResolvedException) as exc_info:
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, ResolutionAction.WARN
            )

        assert exc_info.value.message == "Report has already been resolved"

    def test_second_resolution_rejected(
        self, db_session, admin_user, author_user, pending_report
    ):
        """Resolving twice fails and keeps the first decision."""
        ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, ResolutionAction.DISMISS
        )

        with pytest.raises(ReportAlreadyResolvedException):
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, ResolutionAction.BAN
            )

        assert (
            reload(db_session, Report, pending_report.id).status
            == ReportStatus.DISMISSED
        )
        assert reload(db_session, User, author_user.id).is_banned is False

    def test_concurrent_resolution_loses_race(
        self, db_session, admin_user, author_user, pending_report
    ):
        """A resolver working from a stale read does not overwrite the winner."""
        # Another admin's update lands after our session loaded the report
        db_session.execute(
            update(Report)
            .where(Report.id == pending_report.id)
            .values(status=ReportStatus.DISMISSED)
            .execution_options(synchronize_session=False)
        )
        assert pending_report.status == ReportStatus.PENDING

        with pytest.raises(ReportAlreadyResolvedException):
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, ResolutionAction.BAN
            )

        assert reload(db_session, User, author_user.id).is_banned is False

    def test_unknown_action_rejected(self, db_session, admin_user, pending_report):
        """An unknown action is a validation error and leaves the report PENDING."""
        with pytest.raises(InvalidResolutionActionException) as exc_info:
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, "suspend"
            )

        assert exc_info.value.message == "Invalid resolution action: suspend"
        assert (
            reload(db_session, Report, pending_report.id).status
            == ReportStatus.PENDING
        )

    def test_report_not_found(self, db_session, admin_user):
        """Unknown report ids raise ReportNotFoundException."""
        with pytest.raises(ReportNotFoundException):
            ModerationService.resolve_report(
                db_session, admin_user.id, "missing", ResolutionAction.DISMISS
            )

    def test_non_admin_rejected(self, db_session, test_user, pending_report):
        """The default policy only lets admins resolve."""
        with pytest.raises(InsufficientPermissionsException):
            ModerationService.resolve_report(
                db_session, test_user.id, pending_report.id, ResolutionAction.DISMISS
            )

        assert (
            reload(db_session, Report, pending_report.id).status
            == ReportStatus.PENDING
        )

    def test_inactive_admin_rejected(self, db_session, admin_user, pending_report):
        """Deactivated admins cannot resolve."""
        admin_user.is_active = False
        db_session.commit()

        with pytest.raises(InsufficientPermissionsException):
            ModerationService.resolve_report(
                db_session, admin_user.id, pending_report.id, ResolutionAction.WARN
            )

    def test_custom_policy(self, db_session, test_user, pending_report):
        """An injected policy replaces the admin check."""
        report = ModerationService.resolve_report(
            db_session,
            test_user.id,
            pending_report.id,
            ResolutionAction.DISMISS,
            policy=AllowAllPolicy(),
        )

        assert report.status == ReportStatus.DISMISSED
        assert report.reviewed_by == test_user.id


class TestModerationQueue:
    """Tests for ModerationService.get_moderation_queue"""

    def _report_post(self, db_session, post_id: str, reporters: int) -> None:
        for i in range(reporters):
            user = User(username=f"{post_id}-r{i}", full_name=f"Reporter {i}")
            db_session.add(user)
            db_session.flush()
            db_session.add(
                Report(
                    post_id=post_id,
                    reported_by_id=user.id,
                    reason=ReportReason.SPAM,
                )
            )
        db_session.commit()

    def test_queue_annotates_active_counts(self, db_session, author_user):
        """Queue items carry their post's active report count."""
        db_session.add_all(
            [
                Post(id="hot", title="Hot post", author_id=author_user.id),
                Post(id="cold", title="Cold post", author_id=author_user.id),
            ]
        )
        db_session.commit()
        self._report_post(db_session, "hot", 5)
        self._report_post(db_session, "cold", 1)

        queue = ModerationService.get_moderation_queue(db_session, limit=50)

        assert queue["pagination"]["total"] == 6
        hot = [item for item in queue["reports"] if item.post_id == "hot"]
        cold = [item for item in queue["reports"] if item.post_id == "cold"]
        assert len(hot) == 5
        assert all(item.active_report_count == 5 for item in hot)
        assert all(item.needs_review for item in hot)
        assert cold[0].active_report_count == 1
        assert cold[0].needs_review is False
        assert cold[0].post.author.username == "author"

    def test_queue_status_filter(self, db_session, admin_user, pending_report):
        """Filtering by status only returns matching reports."""
        assert (
            ModerationService.get_moderation_queue(
                db_session, status=ReportStatus.DISMISSED
            )["reports"]
            == []
        )

        ModerationService.resolve_report(
            db_session, admin_user.id, pending_report.id, ResolutionAction.DISMISS
        )
        queue = ModerationService.get_moderation_queue(
            db_session, status=ReportStatus.DISMISSED
        )

        assert [item.id for item in queue["reports"]] == [pending_report.id]
        assert queue["reports"][0].active_report_count == 0

    def test_empty_queue(self, db_session):
        """An empty queue still has pagination metadata."""
        queue = ModerationService.get_moderation_queue(db_session)

        assert queue["reports"] == []
        assert queue["pagination"] == {
            "page": 1,
            "limit": 20,
            "total": 0,
            "total_pages": 0,
        }
