from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InactiveUserException,
    InsufficientPermissionsException,
    UserBannedException,
)
from repositories.database import get_db
from repositories.user_repository import UserRepository
from services.sanction_service import SanctionService

# Tokens are issued by the identity service; this API only verifies them
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def decode_access_token(token: str) -> schemas.TokenData:
    """
    Decode a bearer token into its user id.

    Raises:
        AuthenticationException: If the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationException("Could not validate credentials")
    return schemas.TokenData(user_id=str(user_id))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> db_models.User:
    """
    Get the current authenticated user from the JWT token.

    Raises:
        AuthenticationException: If credentials are missing, invalid or the
            user no longer exists.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    token_data = decode_access_token(credentials.credentials)
    user = UserRepository(db).get_by_id(token_data.user_id)
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user


async def get_current_active_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Get the current active user and verify they are not banned.

    Expired bans are ignored here, so no cleanup job is needed to lift them.

    Raises:
        InactiveUserException: If the user account has been deactivated.
        UserBannedException: If the user is currently banned.
    """
    if not bool(current_user.is_active):
        raise InactiveUserException("Account has been deactivated")

    if SanctionService.is_currently_banned(current_user):
        raise UserBannedException(current_user.ban_expires_at)

    return current_user


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require admin permissions.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if not bool(current_user.is_admin):
        raise InsufficientPermissionsException("Admin privileges required")
    return current_user
