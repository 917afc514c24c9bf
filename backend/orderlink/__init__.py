"""OrderLink - custom order links backed by Shopify draft orders."""

__version__ = "0.1.0"
