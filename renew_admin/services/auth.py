"""
Account authentication and session tokens.

Passwords are hashed with passlib; session tokens are HS256 JWTs (PyJWT)
whose ``sub`` claim is the user id and whose lifetime is
``jwt_expiration_days``.

The only admin is the seed account from settings. seed_admin() runs at
startup and, when ``reset_admin_on_startup`` is set, deletes and recreates
it so a changed password takes effect.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from renew_admin.core.config import Settings
from renew_admin.core.database import get_db_pool
from renew_admin.core.errors import AuthenticationError, StoreError
from renew_admin.models.enums import UserRole
from renew_admin.models.schemas import User, UserInfo
from renew_admin.services.stores import DB_ERRORS, describe_store_error
from renew_admin.sql.user_queries import (
    DELETE_USER_BY_USERNAME,
    GET_USER_BY_ID,
    GET_USER_BY_USERNAME,
    INSERT_USER,
)


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash; malformed hashes never verify."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, settings: Settings, now: Optional[datetime] = None) -> str:
    """
    Create a signed session token for ``user_id``.

    Args:
        user_id: Account id stored in the ``sub`` claim.
        settings: Supplies the secret, algorithm and lifetime.
        now: Issue time; defaults to the current UTC time.
    """
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + timedelta(days=settings.jwt_expiration_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """
    Return the user id carried by ``token``.

    Raises:
        AuthenticationError: If the token is expired, tampered or malformed.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token") from e

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token payload") from e


def to_user_info(user: User) -> UserInfo:
    return UserInfo(id=user.id, username=user.username, role=user.role)


def _record_to_user(row) -> User:
    return User(
        id=row['id'],
        username=row['username'],
        password_hash=row['password_hash'],
        role=UserRole(row['role']),
    )


class AuthService:

    def __init__(self, settings: Settings):
        self.settings = settings

    async def _fetch_user(self, query: str, arg) -> Optional[User]:
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(query, arg)
        except DB_ERRORS as e:
            logger.error(f"Failed to load user: {e}")
            raise StoreError(describe_store_error(e)) from e
        return _record_to_user(row) if row else None

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return await self._fetch_user(GET_USER_BY_ID, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._fetch_user(GET_USER_BY_USERNAME, username)

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, else None."""
        user = await self.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {username!r}")
            return None
        logger.info(f"User {username!r} logged in")
        return user

    async def user_for_token(self, token: str) -> User:
        """
        Resolve a session token to its account.

        Raises:
            AuthenticationError: Bad token, or the account no longer exists.
        """
        user_id = decode_access_token(token, self.settings)
        user = await self.get_user_by_id(user_id)
        if user is None:
            raise AuthenticationError("User not found", {'user_id': user_id})
        return user

    async def seed_admin(self, reset: Optional[bool] = None) -> User:
        """
        Ensure the seed admin account exists.

        Args:
            reset: Delete and recreate an existing account. Defaults to
                ``settings.reset_admin_on_startup``.
        """
        if reset is None:
            reset = self.settings.reset_admin_on_startup
        username = self.settings.admin_username

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                async with conn.transaction():
                    if reset:
                        await conn.execute(DELETE_USER_BY_USERNAME, username)
                    else:
                        row = await conn.fetchrow(GET_USER_BY_USERNAME, username)
                        if row is not None:
                            return _record_to_user(row)
                    row = await conn.fetchrow(
                        INSERT_USER,
                        username,
                        hash_password(self.settings.admin_password),
                        UserRole.ADMIN.value,
                    )
        except DB_ERRORS as e:
            logger.error(f"Failed to seed admin account: {e}")
            raise StoreError(describe_store_error(e)) from e

        logger.info(f"Admin account {username!r} created")
        return _record_to_user(row)


__all__ = [
    'AuthService',
    'hash_password',
    'verify_password',
    'create_access_token',
    'decode_access_token',
    'to_user_info',
]
