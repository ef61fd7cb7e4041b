"""
Service for user sanctions (bans).
"""

from datetime import datetime, timedelta
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import ensure_utc, utc_now
from models.config import settings
from models.exceptions import InvalidBanDurationException, UserNotFoundException
from repositories.db_models import User
from repositories.user_repository import UserRepository

# Legacy marker: a resolve reason containing this word asks for a short ban
TEMPORARY_BAN_MARKER = "temporary"


class SanctionService:
    """Service for applying and checking user bans."""

    @staticmethod
    def compute_ban_expiry(
        reason: Optional[str] = None,
        duration_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[datetime]:
        """
        Work out when a new ban ends.

        An explicit duration always wins. Without one, a reason containing
        "temporary" (case-sensitive) gives a TEMPORARY_BAN_DAYS ban, which is
        what the existing admin clients rely on. Anything else is permanent.

        Args:
            reason: Free-text reason given by the admin
            duration_days: Explicit ban length in days
            now: Reference time (defaults to current UTC time)

        Returns:
            Expiry timestamp, or None for a permanent ban

        Raises:
            InvalidBanDurationException: If duration_days is less than 1
        """
        now = now or utc_now()

        if duration_days is not None:
            if duration_days < 1:
                raise InvalidBanDurationException(duration_days)
            return now + timedelta(days=duration_days)

        if reason and TEMPORARY_BAN_MARKER in reason:
            return now + timedelta(days=settings.TEMPORARY_BAN_DAYS)

        return None

    @staticmethod
    def apply_ban(
        db: Session,
        user_id: str,
        reason: Optional[str] = None,
        duration_days: Optional[int] = None,
        commit: bool = True,
    ) -> User:
        """
        Ban a user.

        Args:
            db: Database session
            user_id: ID of the user to ban
            reason: Reason shown to the user; defaults to DEFAULT_BAN_REASON
            duration_days: Explicit ban length in days (None = use reason rule)
            commit: Commit immediately. Pass False to stage the change inside
                a larger transaction owned by the caller.

        Returns:
            The updated user

        Raises:
            UserNotFoundException: If user not found
            InvalidBanDurationException: If duration_days is less than 1
        """
        user_repo = UserRepository(db)

        user = user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundException(user_id)

        expires_at = SanctionService.compute_ban_expiry(reason, duration_days)

        user.is_banned = True
        user.ban_reason = reason or settings.DEFAULT_BAN_REASON
        user.ban_expires_at = expires_at

        if commit:
            user_repo.commit()
            user_repo.refresh(user)
        else:
            user_repo.flush()

        logger.info(
            f"Banned user {user_id} "
            f"({'until ' + expires_at.isoformat() if expires_at else 'permanently'})"
        )
        return user

    @staticmethod
    def is_currently_banned(user: User, now: Optional[datetime] = None) -> bool:
        """
        Check whether a ban is in force right now.

        Expired temporary bans stay recorded on the user but no longer count.

        Args:
            user: User to check
            now: Reference time (defaults to current UTC time)

        Returns:
            True if the user is banned and the ban has not expired
        """
        if not user.is_banned:
            return False

        expires_at = ensure_utc(user.ban_expires_at)
        if expires_at is None:
            return True

        return expires_at > (now or utc_now())
