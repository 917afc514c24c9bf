"""Shopify Admin API access."""

from .client import ShopifyAdminClient, ShopifyApiError
from .gid import draft_order_gid, parse_gid

__all__ = [
    "ShopifyAdminClient",
    "ShopifyApiError",
    "draft_order_gid",
    "parse_gid",
]
