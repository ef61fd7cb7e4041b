"""
Domain exceptions raised by the service layer.

Services never raise HTTP errors. These exceptions are translated to HTTP
responses by the centralized handlers in main.py, which keeps the moderation
workflow usable from scripts and background jobs as well as from the API.

Every exception carries a correlation ID so an error shown to a moderator can
be matched with logs and Sentry events.
"""

from datetime import datetime

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Request correlation ID, generated if none is active.
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# Users and content


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, user_id: str):
        super().__init__(f"User with ID {user_id} not found")
        self.user_id = user_id


class PostNotFoundException(NotFoundException):
    """Reported content item does not exist."""

    def __init__(self, post_id: str):
        super().__init__("Post not found")
        self.post_id = post_id


class InactiveUserException(PermissionDeniedException):
    """User account is inactive."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class UserBannedException(PermissionDeniedException):
    """Raised when a banned user tries to use an authenticated endpoint."""

    def __init__(self, expires_at: datetime | None = None):
        if expires_at:
            message = (
                f"Your account is temporarily banned until {expires_at.isoformat()}"
            )
        else:
            message = "Your account has been permanently banned"
        super().__init__(message)
        self.expires_at = expires_at


# ============================================================================
# Report / Moderation Exceptions
# ============================================================================


class MissingPostIdException(ValidationException):
    """Raised when a report is filed without a content id."""

    def __init__(self, message: str = "Post ID is required"):
        super().__init__(message)


class DuplicateReportException(ConflictException):
    """Raised when a user reports the same content twice."""

    def __init__(self, message: str = "You have already reported this post"):
        super().__init__(message)


class ReportNotFoundException(NotFoundException):
    """Raised when a report does not exist."""

    def __init__(self, report_id: str):
        super().__init__("Report not found")
        self.report_id = report_id


class ReportAlreadyResolvedException(ValidationException):
    """Raised when resolving a report that has left the PENDING state."""

    def __init__(self, message: str = "Report has already been resolved"):
        super().__init__(message)


class InvalidBanDurationException(ValidationException):
    """Raised when an explicit ban duration is not a positive number of days."""

    def __init__(self, duration_days: int):
        super().__init__(f"Ban duration must be at least 1 day, got {duration_days}")
        self.duration_days = duration_days


class InvalidReportReasonException(ValidationException):
    """Raised when a report reason is not one of the known categories."""

    def __init__(self, reason: object):
        super().__init__(f"Invalid report reason: {reason}")
        self.reason = reason


class InvalidResolutionActionException(ValidationException):
    """Raised when a resolution action is not warn, ban or dismiss."""

    def __init__(self, action: object):
        super().__init__(f"Invalid resolution action: {action}")
        self.action = action
