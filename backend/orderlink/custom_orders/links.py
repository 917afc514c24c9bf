"""Token index (draft_order_link) reads and writes.

Upserts are last-write-wins; callers own the transaction.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.draft_order_link import DraftOrderLink


def get_link(db: Session, shop: str, token: str) -> Optional[DraftOrderLink]:
    return db.query(DraftOrderLink).filter(
        DraftOrderLink.shop == shop,
        DraftOrderLink.token == token
    ).first()


def record_link(db: Session, shop: str, token: str, draft_order_id: int) -> DraftOrderLink:
    """Insert or repoint the index row for a token."""
    link = get_link(db, shop, token)
    if link:
        link.draft_order_id = int(draft_order_id)
    else:
        link = DraftOrderLink(shop=shop, token=token, draft_order_id=int(draft_order_id))
        db.add(link)
    db.flush()
    return link


def list_links(db: Session, shop: str) -> List[DraftOrderLink]:
    return db.query(DraftOrderLink).filter(
        DraftOrderLink.shop == shop
    ).order_by(DraftOrderLink.created_at.desc(), DraftOrderLink.id.desc()).all()


def mark_links_purchased(
    db: Session,
    shop: str,
    draft_order_id: Optional[int] = None,
    token: Optional[str] = None,
) -> int:
    """Flag index rows purchased by draft order ID or by token.

    Returns:
        int: Number of rows updated
    """
    if draft_order_id is None and token is None:
        return 0
    query = db.query(DraftOrderLink).filter(DraftOrderLink.shop == shop)
    if draft_order_id is not None:
        query = query.filter(DraftOrderLink.draft_order_id == int(draft_order_id))
    if token is not None:
        query = query.filter(DraftOrderLink.token == token)
    return query.update(
        {
            DraftOrderLink.is_purchased: True,
            DraftOrderLink.purchased_at: datetime.now(timezone.utc),
        }
    )
