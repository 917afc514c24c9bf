"""Admin authentication: shop-scoped JWT bearer tokens."""
