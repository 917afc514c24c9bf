"""Public storefront endpoints for customer links.

These run on the shop's own domain (directly or through the app proxy), so
they are unauthenticated and served with open CORS.
"""

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_shopify_transport, resolve_shop_domain, storefront_client
from ..errors import InvalidRequestError
from .checkout import CheckoutService
from .resolver import OrderResolver
from .schemas import CheckoutRequest

router = APIRouter(tags=["storefront"])

STOREFRONT_PATH_PREFIXES = ("/api/get-order", "/api/process-checkout", "/app-proxy/")


def _get_order(db: Session, token: Optional[str], shop: Optional[str], transport):
    if not token or not shop:
        raise InvalidRequestError("Missing token or shop")
    shop_domain = resolve_shop_domain(shop)
    with storefront_client(db, shop_domain, transport=transport) as client:
        resolver = OrderResolver(db, client, shop_domain)
        return resolver.to_response(resolver.resolve(token))


@router.get("/api/get-order")
def get_order(
    token: Optional[str] = Query(None),
    shop: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    transport: Optional[httpx.BaseTransport] = Depends(get_shopify_transport),
):
    """
    Resolve a customer link for the storefront order page.

    Raises:
        InvalidRequestError: Missing or invalid token or shop
        NotFoundError: Unknown shop or no matching order
    """
    return _get_order(db, token, shop, transport)


@router.get("/app-proxy/get-order")
def app_proxy_get_order(
    token: Optional[str] = Query(None),
    shop: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    transport: Optional[httpx.BaseTransport] = Depends(get_shopify_transport),
):
    """Same as /api/get-order, reached through the Shopify app proxy."""
    return _get_order(db, token, shop, transport)


@router.post("/api/process-checkout")
def process_checkout(
    body: CheckoutRequest,
    db: Session = Depends(get_db),
    transport: Optional[httpx.BaseTransport] = Depends(get_shopify_transport),
):
    """
    Price the selected options and return the checkout URL.

    Returns:
        {success: true, checkoutUrl}

    Raises:
        InvalidRequestError: Bad key, shop, draftOrderId or selection
        ConflictError: If the order is already purchased
        NotFoundError: If the order cannot be found
    """
    if not body.token or not body.shop:
        raise InvalidRequestError("Missing token or shop")
    shop_domain = resolve_shop_domain(body.shop)
    with storefront_client(db, shop_domain, transport=transport) as client:
        resolved = OrderResolver(db, client, shop_domain).resolve(body.token)
        checkout_url = CheckoutService(db, client).process_checkout(resolved, body)
    return {"success": True, "checkoutUrl": checkout_url}
