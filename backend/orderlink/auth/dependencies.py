"""Admin authentication dependency.

Usage:
    @router.get("/order-blocks")
    def list_blocks(shop: Shop = Depends(get_current_shop)):
        ...
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.shop import Shop
from .jwt import decode_token

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_shop(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Shop:
    """Resolve the bearer token to an installed shop.

    Returns:
        Shop: The shop the token was issued for, with its Admin API token

    Raises:
        HTTPException 401: Expired or invalid token, or a shop that is not installed
    """
    try:
        claims = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(str(e))

    domain = claims.get("sub")
    if not domain:
        raise _unauthorized("Invalid token: missing shop claim")

    shop = db.query(Shop).filter(Shop.domain == domain).first()
    if shop is None:
        raise _unauthorized("Shop not installed")
    return shop
