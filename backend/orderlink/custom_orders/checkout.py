"""Storefront checkout.

Prices are computed from the option groups stored with the order; the
storefront only says which values were picked.
"""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ..errors import ConflictError, InvalidRequestError, NotFoundError
from ..observability.logging_config import get_logger
from ..observability.metrics import checkouts_total
from ..order_blocks.service import OrderBlockService
from ..shopify.client import ShopifyAdminClient
from .pricing import build_line_item, select_options, selection_from_legacy_variant
from .resolver import SOURCE_ORDER_BLOCK, ResolvedOrder
from .schemas import CheckoutRequest

logger = get_logger(__name__)


class CheckoutService:
    """Price the customer's selection and hand back a checkout URL."""

    def __init__(self, db: Session, client: ShopifyAdminClient):
        self.db = db
        self.client = client

    def selections_for(self, option_groups: List[Dict[str, Any]], request: CheckoutRequest) -> Dict[str, Any]:
        """Selections from the request, translating the legacy variant fields."""
        if request.selections:
            return dict(request.selections)
        if request.variant_name is not None:
            return selection_from_legacy_variant(
                option_groups, request.variant_name, request.price
            )
        return {}

    def process_checkout(self, resolved: ResolvedOrder, request: CheckoutRequest) -> str:
        """Apply the selection to the order's draft order.

        Args:
            resolved: Order behind the customer link
            request: Checkout request from the storefront

        Returns:
            str: Invoice URL the customer completes checkout at

        Raises:
            InvalidRequestError: Mismatched draft order, invalid selection or
                unreadable stored option groups
            ConflictError: If the order is already purchased
            NotFoundError: If the draft order vanished
            ShopifyApiError: If Shopify rejects the update
        """
        if request.draft_order_id not in (None, ""):
            try:
                requested_id = int(request.draft_order_id)
            except (TypeError, ValueError):
                raise InvalidRequestError("Invalid draftOrderId")
            if requested_id != resolved.draft_order_id:
                raise InvalidRequestError("draftOrderId does not match this order")

        if resolved.is_purchased:
            raise ConflictError("Order already purchased")

        option_groups = resolved.read_option_groups(strict=True)
        selections = self.selections_for(option_groups, request)

        if resolved.source == SOURCE_ORDER_BLOCK:
            invoice_url = OrderBlockService(self.db).sync_draft_order(
                resolved.order_block, self.client, selections
            )
        else:
            selected = select_options(option_groups, selections)
            line_item = build_line_item(resolved.product_title, selected)
            draft_order = self.client.update_draft_order(
                resolved.draft_order_id, {"line_items": [line_item]}
            )
            if draft_order is None:
                raise NotFoundError("Order not found")
            invoice_url = draft_order.get("invoice_url")

        checkouts_total.labels(source=resolved.source).inc()
        logger.info(
            f"Checkout prepared for {resolved.source} {resolved.draft_order_id}",
            extra={"shop": resolved.shop}
        )
        return invoice_url
