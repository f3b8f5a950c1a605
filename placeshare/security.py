"""
PlaceShare Backend: Authorization Gate
======================================

What:  Password hashing, token issuing, and the FastAPI dependency that turns
       a bearer token into the caller's user id.
How:   passlib (pbkdf2_sha256) for password hashes; python-jose for HS256
       JWTs carrying {userId, email, exp}. Any problem with the credential
       (missing header, bad signature, expired, malformed claim) raises
       UnauthorizedError before the request reaches a service.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from placeshare.config import Settings
from placeshare.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# auto_error=False: a missing header is reported through UnauthorizedError,
# so it renders with the same body as every other 401
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or corrupt hash
        return False


def create_access_token(user_id: uuid.UUID, email: str, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    claims = {"userId": str(user_id), "email": email, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify signature and expiry.

    Raises:
        UnauthorizedError for any invalid token.
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", str(e))
        raise UnauthorizedError()


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """FastAPI dependency guarding every mutating place route."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    settings: Settings = request.app.state.settings
    claims = decode_access_token(credentials.credentials, settings)

    try:
        return uuid.UUID(str(claims["userId"]))
    except (KeyError, ValueError):
        logger.info("Bearer token carries no usable userId claim")
        raise UnauthorizedError()
