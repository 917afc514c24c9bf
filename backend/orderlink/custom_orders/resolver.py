"""Customer link resolution.

Turns the key of a customer link into the order it points at: a token
(indexed, or found by scanning draft order tags) or an order block.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFoundError
from ..models.draft_order_link import DraftOrderLink
from ..models.order_block import OrderBlock
from ..observability.logging_config import get_logger
from ..observability.metrics import order_resolutions_total
from ..order_blocks.service import OrderBlockService
from ..shopify.client import ShopifyAdminClient, ShopifyApiError
from ..shopify.gid import parse_gid
from . import note_attributes
from .links import get_link, record_link
from .tokens import LinkKey, LinkKeyKind, classify_link_key, has_tag, token_tag

logger = get_logger(__name__)

SOURCE_DRAFT_ORDER = "draft_order"
SOURCE_ORDER_BLOCK = "order_block"


@dataclass
class ResolvedOrder:
    """An order reached through a customer link."""
    shop: str
    key: LinkKey
    source: str
    draft_order: Optional[Dict[str, Any]] = None
    order_block: Optional[OrderBlock] = None
    link: Optional[DraftOrderLink] = None

    @property
    def draft_order_id(self) -> Optional[int]:
        if self.draft_order is not None:
            return int(self.draft_order["id"])
        if self.order_block is not None and self.order_block.shopify_draft_order_id:
            try:
                return parse_gid(self.order_block.shopify_draft_order_id, "DraftOrder")
            except ValueError:
                return None
        return None

    @property
    def option_groups(self) -> List[Dict[str, Any]]:
        return self.read_option_groups()

    def read_option_groups(self, strict: bool = False) -> List[Dict[str, Any]]:
        """Stored option groups; ``strict`` rejects unreadable draft order data."""
        if self.order_block is not None:
            return list(self.order_block.option_groups or [])
        return note_attributes.option_groups_from_draft_order(self.draft_order or {}, strict=strict)

    @property
    def product_title(self) -> str:
        if self.order_block is not None:
            return self.order_block.product_title
        return note_attributes.product_title_from_draft_order(self.draft_order or {})

    @property
    def is_purchased(self) -> bool:
        if self.order_block is not None:
            return bool(self.order_block.is_purchased)
        if (self.draft_order or {}).get("status") == "completed":
            return True
        return bool(self.link and self.link.is_purchased)


class OrderResolver:
    """Resolve link keys for one shop."""

    def __init__(self, db: Session, client: ShopifyAdminClient, shop: str):
        self.db = db
        self.client = client
        self.shop = shop

    def resolve(self, raw_key: Optional[str]) -> ResolvedOrder:
        """Find the order behind a link key.

        Raises:
            InvalidRequestError: If the key has no known format
            NotFoundError: If nothing matches the key
        """
        key = classify_link_key(raw_key)

        if key.kind == LinkKeyKind.TOKEN:
            resolved = self._resolve_token(key)
        else:
            resolved = self._resolve_order_block(key)

        if resolved is None:
            order_resolutions_total.labels(path="miss").inc()
            logger.info(
                f"No order found for {key.kind.value} key",
                extra={"shop": self.shop, "key": key.value}
            )
            raise NotFoundError("Order not found")
        return resolved

    def _resolve_token(self, key: LinkKey) -> Optional[ResolvedOrder]:
        link = get_link(self.db, self.shop, key.value)
        if link:
            draft_order = self.client.get_draft_order(link.draft_order_id)
            if draft_order is None:
                logger.warning(
                    f"Indexed draft order {link.draft_order_id} no longer exists",
                    extra={"shop": self.shop, "token": key.value}
                )
                return None
            order_resolutions_total.labels(path="link").inc()
            return ResolvedOrder(self.shop, key, SOURCE_DRAFT_ORDER, draft_order=draft_order, link=link)

        # Links created before the index existed are only findable by tag
        tag = token_tag(key.value)
        for draft_order in self.client.list_draft_orders(limit=settings.DRAFT_ORDER_SCAN_LIMIT):
            if has_tag(draft_order.get("tags"), tag):
                link = self._backfill_link(key.value, draft_order["id"])
                order_resolutions_total.labels(path="scan").inc()
                return ResolvedOrder(self.shop, key, SOURCE_DRAFT_ORDER, draft_order=draft_order, link=link)
        return None

    def _backfill_link(self, token: str, draft_order_id: int) -> DraftOrderLink:
        """Index a token found by scanning.

        A concurrent resolution of the same token may insert the row first;
        the unique (shop, token) constraint then rejects ours and the stored
        row is used instead.
        """
        try:
            link = record_link(self.db, self.shop, token, draft_order_id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            link = get_link(self.db, self.shop, token)
            if link is None:
                raise
            logger.info(
                f"Link for draft order {draft_order_id} was indexed concurrently",
                extra={"shop": self.shop, "token": token}
            )
            return link
        logger.info(
            f"Backfilled link for draft order {draft_order_id}",
            extra={"shop": self.shop, "token": token}
        )
        return link

    def _resolve_order_block(self, key: LinkKey) -> Optional[ResolvedOrder]:
        block = OrderBlockService(self.db).get_by_key(self.shop, key)
        if not block:
            return None
        order_resolutions_total.labels(path="order_block").inc()
        return ResolvedOrder(self.shop, key, SOURCE_ORDER_BLOCK, order_block=block)

    # ------------------------------------------------------------------
    # Storefront response
    # ------------------------------------------------------------------

    def product_image(self, draft_order: Dict[str, Any]) -> Optional[str]:
        """Image URL of a draft order, following the legacy metafield flag.

        The metafield lookup is best effort; a failure leaves the image empty.
        """
        image = note_attributes.get_note_attribute(draft_order, note_attributes.IMAGE)
        if image != note_attributes.LEGACY_IMAGE_FLAG:
            return image or None
        try:
            metafields = self.client.list_draft_order_metafields(int(draft_order["id"]))
        except ShopifyApiError as exc:
            logger.warning(
                f"Could not load image metafield of draft order {draft_order['id']}: {exc.message}",
                extra={"shop": self.shop}
            )
            return None
        return note_attributes.image_metafield_value(metafields)

    def to_response(self, resolved: ResolvedOrder) -> Dict[str, Any]:
        if resolved.source == SOURCE_ORDER_BLOCK:
            return self._order_block_response(resolved)

        draft_order = resolved.draft_order
        customer = draft_order.get("customer") or {}
        return {
            "success": True,
            "source": SOURCE_DRAFT_ORDER,
            "draftOrderId": resolved.draft_order_id,
            "productTitle": resolved.product_title,
            "productImage": self.product_image(draft_order),
            "productVideo": note_attributes.get_note_attribute(draft_order, note_attributes.VIDEO) or None,
            "note": draft_order.get("note") or "",
            "optionGroups": resolved.option_groups,
            "price": draft_order.get("total_price"),
            "currency": draft_order.get("currency"),
            "customerEmail": draft_order.get("email") or customer.get("email"),
            "shop": self.shop,
            "isPurchased": resolved.is_purchased,
        }

    def _order_block_response(self, resolved: ResolvedOrder) -> Dict[str, Any]:
        block = resolved.order_block
        images = list(block.images or [])
        return {
            "success": True,
            "source": SOURCE_ORDER_BLOCK,
            "draftOrderId": resolved.draft_order_id,
            "reference": block.reference,
            "productTitle": block.product_title,
            "productImage": images[0] if images else None,
            "images": images,
            "productVideo": block.video_url,
            "note": block.note or "",
            "optionGroups": resolved.option_groups,
            "price": block.total_price,
            "currency": None,
            "customerEmail": block.customer_email,
            "shop": self.shop,
            "isPurchased": resolved.is_purchased,
        }
