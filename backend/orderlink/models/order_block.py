"""Order Block model for OrderLink

An order block is the app's own record of a custom order request: product
title, option groups, images and an optional customer. It exists before (or
instead of) a Shopify draft order and becomes the source of truth for the
customer link that carries its ID or reference.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, Text, Uuid

from .base import Base, PortableJSONB


class OrderBlock(Base):
    """Custom order request owned by a shop.

    Lifecycle:
    1. Created by the merchant (no draft order yet)
    2. Customer picks options, draft order created or updated (shopify_draft_order_id set)
    3. Checkout completes, webhook flips is_purchased

    Shop isolation: All queries MUST filter by shop.
    """

    __tablename__ = 'order_block'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    shop = Column(Text, nullable=False)
    reference = Column(Text, nullable=False, comment="Human readable number, npdfNNN")

    product_title = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=True)
    customer_name = Column(Text, nullable=True)
    note = Column(Text, nullable=True)

    images = Column(PortableJSONB, nullable=False, default=list, comment="Hosted image URLs")
    video_url = Column(Text, nullable=True)
    option_groups = Column(
        PortableJSONB,
        nullable=False,
        default=list,
        comment="[{name, values: [{id, label, price}]}]"
    )

    # Last customer selection and its computed total
    selected_options = Column(PortableJSONB, nullable=True, comment="{group name: value id}")
    total_price = Column(Text, nullable=True)

    # Shopify sync state
    shopify_draft_order_id = Column(Text, nullable=True, comment="gid://shopify/DraftOrder/<id>")
    invoice_url = Column(Text, nullable=True)
    shopify_order_id = Column(Text, nullable=True, comment="Order created at checkout")
    is_purchased = Column(Boolean, nullable=False, default=False)
    purchased_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index('ix_order_block_shop_created', 'shop', 'created_at'),
        Index('ix_order_block_shop_draft_order', 'shop', 'shopify_draft_order_id'),
        Index('uq_order_block_shop_reference', 'shop', 'reference', unique=True),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for API responses.

        Returns:
            Dict with all fields, converting UUIDs/datetimes to strings
        """
        return {
            'id': str(self.id),
            'shop': self.shop,
            'reference': self.reference,
            'product_title': self.product_title,
            'customer_email': self.customer_email,
            'customer_name': self.customer_name,
            'note': self.note,
            'images': list(self.images or []),
            'video_url': self.video_url,
            'option_groups': list(self.option_groups or []),
            'selected_options': self.selected_options,
            'total_price': self.total_price,
            'shopify_draft_order_id': self.shopify_draft_order_id,
            'invoice_url': self.invoice_url,
            'shopify_order_id': self.shopify_order_id,
            'is_purchased': bool(self.is_purchased),
            'purchased_at': self.purchased_at.isoformat() if self.purchased_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<OrderBlock(id={self.id}, shop='{self.shop}', reference='{self.reference}')>"
