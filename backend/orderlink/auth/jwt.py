"""Admin API tokens.

The embedded admin UI authenticates with an HS256 JWT whose ``sub`` claim is
the shop domain. Tokens are issued by scripts/register_shop.py and checked
on every admin request; the shop's Admin API credentials stay server side.

Claims:
    sub  shop domain, e.g. "acme.myshopify.com"
    iat  issue time (unix seconds)
    exp  iat + JWT_EXPIRY_MINUTES (default 60)

The signing secret is read from JWT_SECRET at call time, so it can be
rotated (or set by tests) without reloading the module.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

ALGORITHM = "HS256"
DEFAULT_EXPIRY_MINUTES = 60


def _get_jwt_secret() -> str:
    """Raises ValueError when JWT_SECRET is unset or empty."""
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def _get_jwt_expiry_minutes() -> int:
    try:
        return int(os.getenv("JWT_EXPIRY_MINUTES", DEFAULT_EXPIRY_MINUTES))
    except ValueError:
        return DEFAULT_EXPIRY_MINUTES


def create_shop_token(shop: str) -> str:
    """Sign an admin token for an installed shop.

    Args:
        shop: Shop domain (e.g. acme.myshopify.com)

    Returns:
        str: Encoded JWT

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": shop,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(minutes=_get_jwt_expiry_minutes())).timestamp()),
    }
    return jwt.encode(claims, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry and return the claims.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or signed with another key
        ValueError: If JWT_SECRET is not set
    """
    secret = _get_jwt_secret()
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {e}")
