"""Security utilities for hashing passwords and handling JWT session tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Request

from leave_tracker.core.config import settings
from leave_tracker.core.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt; input beyond 72 bytes is ignored by bcrypt."""
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Compare a plaintext password against a stored bcrypt digest."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt digest")
        return False


def create_jwt_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
):
    """
    Creates a JWT (JSON Web Token) with the provided data and expiration time.

    Args:
        data (dict): The payload data to be encoded in the JWT.
        expires_delta (timedelta, optional): The time until the token expires.
            Defaults to ``ACCESS_TOKEN_EXPIRE_DAYS`` days.
        secret_key (str, optional): Signing key, defaults to ``SECRET_KEY``.
        algorithm (str, optional): Signing algorithm, defaults to ``ALGORITHM``.

    Returns:
        str: The encoded JWT string.

    Note:
        The token includes standard JWT claims:
        - exp (expiration time)
        - iat (issued at time)
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
    })
    return jwt.encode(to_encode, secret_key or settings.SECRET_KEY, algorithm=algorithm or settings.ALGORITHM)


def decode_jwt_token(token: str, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
    """Decodes and validates a JWT token.

    Args:
        token (str): The JWT token string to decode.
        secret_key (str, optional): Verification key, defaults to ``SECRET_KEY``.
        algorithm (str, optional): Accepted algorithm, defaults to ``ALGORITHM``.

    Returns:
        dict: The decoded token payload containing the claims.

    Raises:
        ForbiddenError: If the token is invalid, expired, or improperly formatted.
    """
    try:
        return jwt.decode(
            token,
            secret_key or settings.SECRET_KEY,
            algorithms=[algorithm or settings.ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired session token")
        raise ForbiddenError("Invalid or expired token")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid session token: {e}")
        raise ForbiddenError("Invalid or expired token")


def bearer_token(request: Request) -> Optional[str]:
    """Extract the bearer token from the Authorization header, if any."""
    header = request.headers.get("authorization")
    if not header:
        return None
    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


async def get_session_claims(request: Request) -> dict:
    """
    Dependency returning the verified claims of the caller's session token
    Raises 401 without a token and 403 for an invalid or expired one
    """
    token = bearer_token(request)
    if not token:
        raise UnauthorizedError("Access token required")
    app_settings = request.app.state.settings
    claims = decode_jwt_token(token, secret_key=app_settings.SECRET_KEY, algorithm=app_settings.ALGORITHM)
    if not claims.get("id"):
        raise ForbiddenError("Invalid or expired token")
    return claims
