"""Order Blocks module for OrderLink

Locally stored custom order requests that sync to a Shopify draft order at
checkout and are marked purchased by webhooks.
"""
