"""Unit tests for init_db functionality."""

from init_db import promote_admin


class TestPromoteAdmin:
    """Tests for promote_admin."""

    def test_promotes_existing_user(self, db_session, test_user):
        """A known username becomes an admin."""
        assert promote_admin(db_session, "reporter") is True

        db_session.refresh(test_user)
        assert test_user.is_admin is True

    def test_already_admin(self, db_session, admin_user):
        """Promoting an admin again is harmless."""
        assert promote_admin(db_session, "moderator") is True
        assert admin_user.is_admin is True

    def test_unknown_user(self, db_session):
        """Users who never signed in cannot be promoted."""
        assert promote_admin(db_session, "nobody") is False

    def test_no_username_configured(self, db_session):
        """Without ADMIN_USERNAME nothing happens."""
        assert promote_admin(db_session, None) is False
        assert promote_admin(db_session, "") is False
