"""Prometheus metrics for OrderLink.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter

# Custom order creation
custom_orders_created_total = Counter(
    "orderlink_custom_orders_created_total",
    "Total custom orders created as Shopify draft orders",
    ["kind"]  # kind: order|template
)

# Link resolution, labelled by the path that answered
order_resolutions_total = Counter(
    "orderlink_order_resolutions_total",
    "Customer link resolutions",
    ["path"]  # path: link|scan|order_block|miss
)

checkouts_total = Counter(
    "orderlink_checkouts_total",
    "Checkout URLs issued",
    ["source"]  # source: draft_order|order_block
)

webhooks_processed_total = Counter(
    "orderlink_webhooks_processed_total",
    "Webhooks received",
    ["topic", "outcome"]  # outcome: updated|no_match|ignored|rejected
)

shopify_api_calls_total = Counter(
    "orderlink_shopify_api_calls_total",
    "Shopify Admin API calls",
    ["method", "outcome"]  # outcome: success|not_found|error
)
