"""Admin authentication: password check and signed JWT tokens.

There is a single admin role. Logging in with the configured password
yields an HS256 token carrying ``role=admin`` that expires after
``jwt_expire_hours``.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt import PyJWTError

from revops_maturity.errors import UnauthorizedError
from revops_maturity.settings import Settings

ADMIN_ROLE: str = "admin"


def check_admin_password(password: str | None, settings: Settings) -> bool:
    """Constant-time comparison against the configured admin password."""
    if not password:
        return False
    return hmac.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))


def create_admin_token(settings: Settings, expires_delta: timedelta | None = None) -> str:
    """Create a signed admin JWT.

    Args:
        settings: Application settings (secret, algorithm, expiry).
        expires_delta: Custom lifetime. Defaults to ``jwt_expire_hours``.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.jwt_expire_hours))
    claims = {"role": ADMIN_ROLE, "iat": now, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_admin_token(token: str, settings: Settings) -> dict[str, Any]:
    """Validate an admin JWT.

    Args:
        token: Raw JWT string.
        settings: Application settings.

    Returns:
        The decoded claims.

    Raises:
        UnauthorizedError: If the token is malformed, badly signed, expired
            or lacks the admin role.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except PyJWTError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc

    if claims.get("role") != ADMIN_ROLE:
        raise UnauthorizedError("Invalid or expired token")
    return claims
