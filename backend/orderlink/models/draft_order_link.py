"""DraftOrderLink model - indexed token lookup for customer links"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Index, Integer, Text

from .base import Base


class DraftOrderLink(Base):
    """Maps a customer-link token to the Shopify draft order it was minted for.

    Replaces scanning the shop's draft orders for a ``t_<token>`` tag. Rows
    are written when a custom order is created and backfilled whenever the
    fallback scan finds a draft order that predates this table.
    """
    __tablename__ = "draft_order_link"
    __table_args__ = (
        Index("uq_draft_order_link_shop_token", "shop", "token", unique=True),
        Index("ix_draft_order_link_shop_draft_order", "shop", "draft_order_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    shop = Column(Text, nullable=False)
    token = Column(Text, nullable=False)
    draft_order_id = Column(BigInteger, nullable=False, comment="Numeric Shopify draft order ID")
    is_purchased = Column(Boolean, nullable=False, default=False)
    purchased_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<DraftOrderLink(shop='{self.shop}', token='{self.token}', draft_order_id={self.draft_order_id})>"
