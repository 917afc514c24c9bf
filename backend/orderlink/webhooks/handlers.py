"""Webhook topic handlers.

Purchases are recorded from two directions: the order created at checkout
(tagged with the block ID or token) and the draft order that was completed.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy.orm import Session

from ..custom_orders.links import mark_links_purchased
from ..custom_orders.tokens import find_order_block_id_in_tags, find_token_in_tags
from ..observability.logging_config import get_logger
from ..observability.metrics import webhooks_processed_total
from ..order_blocks.service import OrderBlockService
from ..shopify.gid import draft_order_gid

logger = get_logger(__name__)

ORDERS_CREATE = "ORDERS_CREATE"
DRAFT_ORDERS_FINALIZED = "DRAFT_ORDERS_FINALIZED"
DRAFT_ORDERS_UPDATE = "DRAFT_ORDERS_UPDATE"


def normalize_topic(topic: Optional[str]) -> str:
    """orders/create, orders-create and ORDERS_CREATE are the same topic."""
    return (topic or "").strip().replace("/", "_").replace("-", "_").upper()


class WebhookResult:
    """Status code and body of a handled webhook."""

    def __init__(self, body: Dict[str, Any], status_code: int = status.HTTP_200_OK):
        self.body = body
        self.status_code = status_code


def _processed(updated: int) -> WebhookResult:
    return WebhookResult({"message": "Webhook processed", "updated": updated})


def _rejected(topic: str, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> WebhookResult:
    webhooks_processed_total.labels(topic=topic, outcome="rejected").inc()
    return WebhookResult({"message": message}, status_code)


class WebhookHandler:
    """Dispatch a webhook to its topic handler."""

    def __init__(self, db: Session):
        self.db = db
        self.order_blocks = OrderBlockService(db)

    def handle(self, topic: Optional[str], shop: Optional[str], payload: Any) -> WebhookResult:
        """Handle one webhook delivery.

        Args:
            topic: Topic from the header or path, in any notation
            shop: Shop domain from X-Shopify-Shop-Domain
            payload: Decoded JSON body

        Returns:
            WebhookResult: Response to send back to Shopify. Rejections
            (missing payload, id or shop, unhandled topic) carry a 4xx
            status and the same {"message": ...} body.
        """
        normalized = normalize_topic(topic)
        if not isinstance(payload, dict) or payload.get("id") is None:
            return _rejected(normalized or "unknown", "Payload or ID missing")
        if not shop:
            return _rejected(normalized or "unknown", "Missing shop domain")

        if normalized == ORDERS_CREATE:
            result = self.handle_order_created(shop, payload)
        elif normalized == DRAFT_ORDERS_FINALIZED:
            result = self.handle_draft_order_completed(shop, payload)
        elif normalized == DRAFT_ORDERS_UPDATE:
            if payload.get("status") != "completed":
                webhooks_processed_total.labels(topic=normalized, outcome="ignored").inc()
                return WebhookResult({"message": "Ignored"})
            result = self.handle_draft_order_completed(shop, payload)
        else:
            logger.info(f"Unhandled webhook topic {topic!r}", extra={"shop": shop})
            return _rejected("unknown", "Unhandled webhook topic", status.HTTP_404_NOT_FOUND)

        if result.status_code != status.HTTP_200_OK:
            webhooks_processed_total.labels(topic=normalized, outcome="rejected").inc()
            return result

        self.db.commit()
        outcome = "updated" if result.body.get("updated") else "no_match"
        webhooks_processed_total.labels(topic=normalized, outcome=outcome).inc()
        return result

    def handle_order_created(self, shop: str, payload: Dict[str, Any]) -> WebhookResult:
        tags = payload.get("tags")
        raw_block_id = find_order_block_id_in_tags(tags)
        token = find_token_in_tags(tags)

        if raw_block_id is None and token is None:
            logger.info(
                f"Order {payload['id']} carries no custom order tag",
                extra={"shop": shop}
            )
            return WebhookResult({"message": "No matching OrderBlock ID tag found"})

        updated = 0
        if raw_block_id is not None:
            try:
                block_id = UUID(raw_block_id)
            except ValueError:
                logger.warning(
                    f"Ignoring malformed order block ID tag on order {payload['id']}",
                    extra={"shop": shop, "tag_value": raw_block_id}
                )
            else:
                updated += self.order_blocks.mark_purchased_by_id(shop, block_id, payload["id"])

        if token is not None:
            updated += mark_links_purchased(self.db, shop, token=token)

        logger.info(
            f"Order {payload['id']} marked {updated} custom order(s) purchased",
            extra={"shop": shop}
        )
        return _processed(updated)

    def handle_draft_order_completed(self, shop: str, payload: Dict[str, Any]) -> WebhookResult:
        try:
            gid = draft_order_gid(payload["id"])
        except (TypeError, ValueError):
            return WebhookResult({"message": "Payload or ID missing"}, status.HTTP_400_BAD_REQUEST)

        updated = self.order_blocks.mark_purchased_by_draft_order(shop, gid)
        updated += mark_links_purchased(self.db, shop, draft_order_id=int(payload["id"]))

        logger.info(
            f"Draft order {payload['id']} completed, {updated} record(s) marked purchased",
            extra={"shop": shop}
        )
        return _processed(updated)
