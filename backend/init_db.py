"""Initialize the database and promote the configured admin account."""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models  # noqa: F401  (registers tables on Base)
from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.user_repository import UserRepository


def promote_admin(db: Session, username: Optional[str]) -> bool:
    """
    Give an existing user admin rights.

    Users come from the identity service, so the admin account must have
    signed in at least once before it can be promoted.

    Returns:
        True if the user was found (and is now an admin)
    """
    if not username:
        return False

    user_repo = UserRepository(db)
    user = user_repo.get_by_username(username)
    if user is None:
        return False

    if not user.is_admin:
        user.is_admin = True
        user_repo.commit()
    return True


def init_db() -> None:
    """Create tables and promote ADMIN_USERNAME."""
    Base.metadata.create_all(bind=engine)
    print("[OK] Database tables created")

    db = SessionLocal()
    try:
        if promote_admin(db, settings.ADMIN_USERNAME):
            print(f"[OK] {settings.ADMIN_USERNAME} is an admin")
        elif settings.ADMIN_USERNAME:
            print(f"[WARN] Admin user {settings.ADMIN_USERNAME} not found, skipped")

        print("\n[OK] Database initialization complete!")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
