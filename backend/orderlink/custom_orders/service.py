"""Custom order service - draft-order backed custom orders and templates."""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..config import settings
from ..errors import InvalidRequestError
from ..observability.logging_config import get_logger
from ..observability.metrics import custom_orders_created_total
from ..shopify.client import ShopifyAdminClient
from . import note_attributes
from .links import list_links, record_link
from .payloads import build_draft_order_payload, placeholder_line_item
from .schemas import CreateCustomOrderRequest, DraftOrderLinkItem, TemplateItem
from .tokens import CUSTOM_TAG, TEMPLATE_TAG, customer_link, generate_token, has_tag, token_tag

logger = get_logger(__name__)

UNTITLED_TEMPLATE = "Untitled Template"


def _missing(value: Any) -> bool:
    """None and empty strings are missing; an empty list is a value."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class CustomOrderService:
    """Service for custom orders stored as Shopify draft orders."""

    def __init__(self, db: Session, client: ShopifyAdminClient):
        self.db = db
        self.client = client

    def create_custom_order(self, shop: str, body: CreateCustomOrderRequest) -> Dict[str, Any]:
        """Create a custom order (or template) draft order.

        Args:
            shop: Shop domain
            body: Form data from the admin

        Returns:
            Response body for the admin form

        Raises:
            InvalidRequestError: If required fields are missing
            ShopifyApiError: If Shopify rejects the draft order
        """
        if body.is_template:
            if _missing(body.template_name) or _missing(body.product_title):
                raise InvalidRequestError("Template Name and Product Title required")
        elif any(_missing(value) for value in (
            body.customer_email, body.customer_name, body.product_title, body.option_groups
        )):
            raise InvalidRequestError("Missing required fields")

        option_groups = note_attributes.clean_option_groups(body.option_groups or [])
        token = None if body.is_template else generate_token()

        if body.is_template:
            tags = [TEMPLATE_TAG]
            extra = {note_attributes.TEMPLATE_NAME: body.template_name}
        else:
            tags = [CUSTOM_TAG, token_tag(token)]
            extra = {note_attributes.TOKEN: token}

        payload = build_draft_order_payload(
            line_item=placeholder_line_item(body.product_title),
            tags=tags,
            note=body.note,
            note_attributes=note_attributes.build_note_attributes(
                title=body.product_title,
                image=body.product_image,
                option_groups=option_groups,
                video=body.product_video,
                extra=extra,
            ),
            customer_email=None if body.is_template else body.customer_email,
            customer_name=None if body.is_template else body.customer_name,
        )

        draft_order = self.client.create_draft_order(payload)
        draft_order_id = draft_order["id"]

        if body.is_template:
            log_audit_event(
                self.db,
                shop=shop,
                action="TEMPLATE_CREATED",
                entity_type="draft_order",
                entity_id=draft_order_id,
                metadata={"template_name": body.template_name},
            )
            self.db.commit()
            custom_orders_created_total.labels(kind="template").inc()
            logger.info(f"Created template draft order {draft_order_id}", extra={"shop": shop})
            return {"success": True, "isTemplate": True}

        record_link(self.db, shop, token, draft_order_id)
        log_audit_event(
            self.db,
            shop=shop,
            action="CUSTOM_ORDER_CREATED",
            entity_type="draft_order",
            entity_id=draft_order_id,
            metadata={"token": token},
        )
        self.db.commit()
        custom_orders_created_total.labels(kind="order").inc()
        logger.info(
            f"Created custom order draft order {draft_order_id}",
            extra={"shop": shop, "token": token}
        )

        return {
            "success": True,
            "draftOrder": draft_order,
            "customerLink": customer_link(shop, token),
            "token": token,
        }

    def list_templates(self) -> List[TemplateItem]:
        """Open draft orders tagged as templates."""
        draft_orders = self.client.list_draft_orders(limit=settings.TEMPLATE_SCAN_LIMIT, status="open")
        templates = []
        for draft_order in draft_orders:
            if not has_tag(draft_order.get("tags"), TEMPLATE_TAG):
                continue
            name = (
                note_attributes.get_note_attribute(draft_order, note_attributes.TEMPLATE_NAME)
                or note_attributes.first_line_item_title(draft_order)
                or UNTITLED_TEMPLATE
            )
            templates.append(TemplateItem(
                id=draft_order["id"],
                name=name,
                option_groups=note_attributes.option_groups_from_draft_order(draft_order),
                product_title=note_attributes.get_note_attribute(draft_order, note_attributes.TITLE),
                img=note_attributes.get_note_attribute(draft_order, note_attributes.IMAGE) or None,
            ))
        return templates

    def list_links(self, shop: str) -> List[DraftOrderLinkItem]:
        return [
            DraftOrderLinkItem(
                token=link.token,
                draft_order_id=link.draft_order_id,
                is_purchased=bool(link.is_purchased),
                customer_link=customer_link(shop, link.token),
                created_at=link.created_at.isoformat() if link.created_at else None,
            )
            for link in list_links(self.db, shop)
        ]
