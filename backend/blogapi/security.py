"""
Blog API Backend — Password Hashing and Credential Verification
================================================================

What:  bcrypt helpers for storing passwords, and the CredentialVerifier
       contract used by AuthenticationMiddleware.

The shipped verifier accepts HTTP Basic credentials (`email:password`) and
checks them against the users table. Anything else in the Authorization
header is REJECTED, never silently accepted.

hash_password and verify_password are synchronous and CPU-bound (about
250 ms at 12 rounds). Async callers run them through run_in_threadpool so
the event loop keeps serving other requests meanwhile.
"""

import base64
import binascii
import logging
from typing import Awaitable, Callable, Optional, Tuple

import bcrypt
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogapi.config import settings
from blogapi.database import async_session_factory
from blogapi.middleware.context import AuthResult, UserInfo
from blogapi.services.query_service import query_service

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72

CredentialVerifier = Callable[[str], Awaitable[AuthResult]]


def hash_password(plain_password: str) -> str:
    password = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password, salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def parse_basic_credentials(header_value: str) -> Optional[Tuple[str, str]]:
    """
    Decode `Basic base64(email:password)`.

    Returns None for any other scheme or a malformed payload.
    """
    scheme, _, encoded = header_value.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    email, sep, password = decoded.partition(":")
    if not sep or not email:
        return None
    return email, password


class DatabaseCredentialVerifier:
    """
    Verifies Basic credentials against the users table.

    A fresh session is opened per check; the middleware runs before the
    route's own session dependency exists.
    """

    def __init__(self, session_factory: async_sessionmaker = async_session_factory):
        self._session_factory = session_factory

    async def __call__(self, header_value: str) -> AuthResult:
        credentials = parse_basic_credentials(header_value)
        if credentials is None:
            return AuthResult.rejected("unsupported or malformed Authorization header")

        email, password = credentials

        session: AsyncSession
        async with self._session_factory() as session:
            user = await query_service.find_user_row_by_email(session, email)

        password_ok = user is not None and await run_in_threadpool(
            verify_password, password, user.password
        )
        if not password_ok:
            logger.info("Rejected credentials for %s", email)
            return AuthResult.rejected("invalid credentials")

        return AuthResult.authenticated(UserInfo(user_id=user.id, username=user.name))
