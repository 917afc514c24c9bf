#!/usr/bin/env python
"""Register a shop and print an admin API token for it.

Stores (or updates) the shop's Admin API access token, then issues a JWT the
admin UI sends as its bearer token. Run once per store, and again whenever
the access token is rotated.

Usage:
    python backend/scripts/register_shop.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    JWT_SECRET: Secret for signing admin tokens (required)
    SHOP_DOMAIN: Store domain, e.g. my-store.myshopify.com (required)
    SHOPIFY_ACCESS_TOKEN: Admin API access token for the store (required)
    SHOPIFY_SCOPE: Granted scopes (optional)
"""

import os
import sys

from orderlink.auth.jwt import create_shop_token
from orderlink.database import get_db_session
from orderlink.models.shop import Shop
from orderlink.shopify.client import normalize_shop_domain


def main():
    """Upsert the shop and print its admin token."""
    if not os.getenv("JWT_SECRET"):
        print("ERROR: JWT_SECRET environment variable is required")
        sys.exit(1)

    try:
        domain = normalize_shop_domain(os.getenv("SHOP_DOMAIN"))
    except ValueError:
        print(f"ERROR: Invalid SHOP_DOMAIN: {os.getenv('SHOP_DOMAIN')!r}")
        print("Example: SHOP_DOMAIN=my-store.myshopify.com python register_shop.py")
        sys.exit(1)

    access_token = os.getenv("SHOPIFY_ACCESS_TOKEN")
    if not access_token:
        print("ERROR: SHOPIFY_ACCESS_TOKEN environment variable is required")
        sys.exit(1)

    with get_db_session() as session:
        shop = session.query(Shop).filter(Shop.domain == domain).first()
        if shop:
            shop.access_token = access_token
            shop.scope = os.getenv("SHOPIFY_SCOPE", shop.scope)
            action = "Updated"
        else:
            shop = Shop(domain=domain, access_token=access_token, scope=os.getenv("SHOPIFY_SCOPE"))
            session.add(shop)
            action = "Registered"

    print(f"✓ {action} shop {domain}")
    print()
    print("Admin API token:")
    print(create_shop_token(domain))


if __name__ == "__main__":
    main()
