"""Order block service - business logic for order blocks.

Order blocks live in the app database. A Shopify draft order is only created
when the customer checks out, and later checkouts update that same draft.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..custom_orders import note_attributes
from ..custom_orders.payloads import build_draft_order_payload
from ..custom_orders.pricing import build_line_item, select_options, total_price
from ..custom_orders.tokens import (
    ORDER_BLOCK_TAG,
    LinkKey,
    LinkKeyKind,
    customer_link,
    order_block_tag,
)
from ..errors import ConflictError, NotFoundError
from ..models.order_block import OrderBlock
from ..observability.logging_config import get_logger
from ..shopify.client import ShopifyAdminClient
from ..shopify.gid import draft_order_gid, parse_gid
from .reference import next_reference
from .schemas import OrderBlockCreate, OrderBlockResponse

logger = get_logger(__name__)


def block_to_response(block: OrderBlock) -> OrderBlockResponse:
    data = block.to_dict()
    return OrderBlockResponse(
        id=data['id'],
        reference=data['reference'],
        product_title=data['product_title'],
        customer_email=data['customer_email'],
        customer_name=data['customer_name'],
        note=data['note'],
        images=data['images'],
        video_url=data['video_url'],
        option_groups=data['option_groups'],
        total_price=data['total_price'],
        shopify_draft_order_id=data['shopify_draft_order_id'],
        invoice_url=data['invoice_url'],
        is_purchased=data['is_purchased'],
        customer_link=customer_link(block.shop, block.id),
        created_at=data['created_at'],
    )


class OrderBlockService:
    """Service for order block operations.

    Every query is scoped to the shop passed in; a block of another shop is
    indistinguishable from a missing one.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, shop: str, data: OrderBlockCreate) -> OrderBlock:
        """Create an order block with the next npdf reference.

        Args:
            shop: Shop domain
            data: Validated create request

        Returns:
            OrderBlock: The committed block
        """
        block = OrderBlock(
            shop=shop,
            reference=next_reference(self.db),
            product_title=data.product_title,
            customer_email=data.customer_email or None,
            customer_name=data.customer_name or None,
            note=data.note,
            images=list(data.images),
            video_url=data.video_url or None,
            option_groups=note_attributes.clean_option_groups(data.option_groups),
        )
        self.db.add(block)
        self.db.flush()

        log_audit_event(
            self.db,
            shop=shop,
            action="ORDER_BLOCK_CREATED",
            entity_type="order_block",
            entity_id=block.id,
            metadata={"reference": block.reference},
        )
        self.db.commit()
        self.db.refresh(block)

        logger.info(
            f"Created order block {block.reference}",
            extra={"shop": shop, "order_block_id": str(block.id)}
        )
        return block

    def list(self, shop: str) -> List[OrderBlock]:
        return self.db.query(OrderBlock).filter(
            OrderBlock.shop == shop
        ).order_by(OrderBlock.created_at.desc()).all()

    def get(self, shop: str, block_id: Union[UUID, str]) -> Optional[OrderBlock]:
        try:
            block_uuid = block_id if isinstance(block_id, UUID) else UUID(str(block_id))
        except ValueError:
            return None
        return self.db.query(OrderBlock).filter(
            OrderBlock.shop == shop,
            OrderBlock.id == block_uuid
        ).first()

    def get_by_reference(self, shop: str, reference: str) -> Optional[OrderBlock]:
        return self.db.query(OrderBlock).filter(
            OrderBlock.shop == shop,
            OrderBlock.reference == reference
        ).first()

    def get_by_key(self, shop: str, key: LinkKey) -> Optional[OrderBlock]:
        """Load the block a customer link points at (ID or reference key)."""
        if key.kind == LinkKeyKind.ORDER_BLOCK_ID:
            return self.get(shop, key.block_id)
        if key.kind == LinkKeyKind.REFERENCE:
            return self.get_by_reference(shop, key.value)
        return None

    def get_or_404(self, shop: str, block_id: Union[UUID, str]) -> OrderBlock:
        block = self.get(shop, block_id)
        if not block:
            raise NotFoundError("Order block not found")
        return block

    def delete(self, shop: str, block_id: Union[UUID, str]) -> None:
        """Delete a block.

        The Shopify draft order, if any, is left alone.

        Raises:
            NotFoundError: If the block does not exist for this shop
        """
        block = self.get_or_404(shop, block_id)
        log_audit_event(
            self.db,
            shop=shop,
            action="ORDER_BLOCK_DELETED",
            entity_type="order_block",
            entity_id=block.id,
            metadata={"reference": block.reference},
        )
        self.db.delete(block)
        self.db.commit()
        logger.info(f"Deleted order block {block.reference}", extra={"shop": shop})

    # ------------------------------------------------------------------
    # Shopify sync
    # ------------------------------------------------------------------

    def build_draft_order_payload(self, block: OrderBlock, line_item: Dict[str, Any]) -> Dict[str, Any]:
        images = list(block.images or [])
        attributes = note_attributes.build_note_attributes(
            title=block.product_title,
            image=images[0] if images else None,
            option_groups=list(block.option_groups or []),
            video=block.video_url,
            extra={
                note_attributes.ORDER_BLOCK_ID: str(block.id),
                note_attributes.REFERENCE: block.reference,
            },
        )
        return build_draft_order_payload(
            line_item=line_item,
            tags=[ORDER_BLOCK_TAG, order_block_tag(block.id)],
            note=block.note,
            note_attributes=attributes,
            customer_email=block.customer_email,
            customer_name=block.customer_name,
        )

    def sync_draft_order(
        self,
        block: OrderBlock,
        client: ShopifyAdminClient,
        selections: Optional[Dict[str, Any]],
    ) -> str:
        """Create or update the block's draft order for the given selections.

        Repeated checkouts update the same draft order. A stored draft that
        no longer exists upstream is replaced by a new one.

        Args:
            block: Order block being checked out
            client: Admin API client for the block's shop
            selections: Group name -> chosen value id

        Returns:
            str: The draft order's invoice URL

        Raises:
            ConflictError: If the block is already purchased
            InvalidRequestError: If the selections do not fit the option groups
            ShopifyApiError: If Shopify rejects the draft order
        """
        if block.is_purchased:
            raise ConflictError("Order already purchased")

        option_groups = list(block.option_groups or [])
        selected = select_options(option_groups, selections)
        line_item = build_line_item(block.product_title, selected)
        payload = self.build_draft_order_payload(block, line_item)

        draft_order = None
        if block.shopify_draft_order_id:
            try:
                draft_order_id = parse_gid(block.shopify_draft_order_id, "DraftOrder")
            except ValueError:
                logger.warning(
                    f"Discarding malformed draft order ID on block {block.reference}",
                    extra={"shop": block.shop, "gid": block.shopify_draft_order_id}
                )
            else:
                draft_order = client.update_draft_order(draft_order_id, payload)
                if draft_order is None:
                    logger.warning(
                        f"Draft order {draft_order_id} of block {block.reference} is gone, recreating",
                        extra={"shop": block.shop}
                    )

        if draft_order is None:
            draft_order = client.create_draft_order(payload)

        block.shopify_draft_order_id = draft_order_gid(draft_order["id"])
        block.invoice_url = draft_order.get("invoice_url")
        block.selected_options = {option.group: option.value_id for option in selected}
        block.total_price = line_item["price"]

        log_audit_event(
            self.db,
            shop=block.shop,
            action="ORDER_BLOCK_SYNCED",
            entity_type="order_block",
            entity_id=block.id,
            metadata={
                "draft_order_id": block.shopify_draft_order_id,
                "total_price": str(total_price(selected)),
            },
        )
        self.db.commit()

        logger.info(
            f"Synced order block {block.reference} to {block.shopify_draft_order_id}",
            extra={"shop": block.shop}
        )
        return block.invoice_url

    # ------------------------------------------------------------------
    # Purchase tracking
    # ------------------------------------------------------------------

    def mark_purchased_by_id(self, shop: str, block_id: Union[UUID, str], order_id: Any) -> int:
        """Mark one block purchased by the order that paid for it.

        Returns:
            int: Number of rows updated (0 or 1)
        """
        block = self.get(shop, block_id)
        if not block:
            return 0
        block.is_purchased = True
        block.purchased_at = datetime.now(timezone.utc)
        block.shopify_order_id = str(order_id) if order_id is not None else None
        log_audit_event(
            self.db,
            shop=shop,
            action="ORDER_PURCHASED",
            entity_type="order_block",
            entity_id=block.id,
            metadata={"order_id": block.shopify_order_id},
        )
        self.db.flush()
        return 1

    def mark_purchased_by_draft_order(self, shop: str, gid: str) -> int:
        """Mark every block of the shop that points at this draft order purchased.

        Returns:
            int: Number of rows updated
        """
        blocks = self.db.query(OrderBlock).filter(
            OrderBlock.shop == shop,
            OrderBlock.shopify_draft_order_id == gid
        ).all()
        now = datetime.now(timezone.utc)
        for block in blocks:
            block.is_purchased = True
            block.purchased_at = now
            log_audit_event(
                self.db,
                shop=shop,
                action="ORDER_PURCHASED",
                entity_type="order_block",
                entity_id=block.id,
                metadata={"draft_order_id": gid},
            )
        self.db.flush()
        return len(blocks)
