"""Global FastAPI dependencies for Shopify access.

This module provides:
- get_shopify_transport: httpx transport used by every Admin API client (None = network)
- get_admin_client: Admin API client for the authenticated shop
- storefront_client: Admin API client for the shop named by a public request

Tests override get_shopify_transport to route Admin API calls to a fake store.
"""

from typing import Generator, Optional

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from .auth.dependencies import get_current_shop
from .config import settings
from .errors import InvalidRequestError, NotFoundError
from .models.shop import Shop
from .shopify.client import ShopifyAdminClient, normalize_shop_domain


def get_shopify_transport() -> Optional[httpx.BaseTransport]:
    """Transport for Admin API clients. None lets httpx use the network."""
    return None


def get_admin_client(
    shop: Shop = Depends(get_current_shop),
    transport: Optional[httpx.BaseTransport] = Depends(get_shopify_transport),
) -> Generator[ShopifyAdminClient, None, None]:
    """Admin API client for the shop behind the admin bearer token."""
    client = ShopifyAdminClient(shop.domain, shop.access_token, transport=transport)
    try:
        yield client
    finally:
        client.close()


def resolve_shop_domain(shop: Optional[str]) -> str:
    """Validate the ``shop`` parameter of a storefront request.

    Raises:
        InvalidRequestError: If the value is not a myshopify domain
    """
    try:
        return normalize_shop_domain(shop)
    except ValueError:
        raise InvalidRequestError("Invalid shop domain")


def storefront_client(
    db: Session,
    shop_domain: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> ShopifyAdminClient:
    """Build an Admin API client for a storefront request.

    The token comes from the shop's installation row, falling back to
    SHOPIFY_ACCESS_TOKEN for single-store deployments.

    Raises:
        NotFoundError: If the shop is not installed and no fallback token is configured
    """
    shop = db.query(Shop).filter(Shop.domain == shop_domain).first()
    if shop:
        access_token = shop.access_token
    elif settings.SHOPIFY_ACCESS_TOKEN:
        access_token = settings.SHOPIFY_ACCESS_TOKEN
    else:
        raise NotFoundError("Shop not installed")
    return ShopifyAdminClient(shop_domain, access_token, transport=transport)
