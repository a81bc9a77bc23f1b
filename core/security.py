"""
Token utilities.

Session issuance (login, signup) lives outside this service; it only has to
verify bearer tokens and, for tests and tooling, mint them.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, TypedDict

import jwt
from fastapi import Request

from core.config import settings

logger = logging.getLogger(__name__)


class JWTPayload(TypedDict, total=False):
    sub: str  # user id
    user_type: str
    exp: int
    iat: int
    type: str


def create_access_token(
    user_id: int,
    user_type: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Subject of the token
        user_type: Role claim, informational only
        expires_delta: Lifetime, defaults to the configured expiry

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expire,
        "type": "access",
    }
    if user_type:
        payload["user_type"] = user_type
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_jwt_token(
    token: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: The token has expired
        jwt.InvalidTokenError: The token is malformed, tampered or not an
            access token
    """
    payload = jwt.decode(
        token,
        secret or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    if payload.get("type", "access") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    return payload


def get_request_metadata(request: Request) -> tuple[Optional[str], Optional[str]]:
    """Client IP and user agent recorded on audit entries."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")
