"""Order block admin API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_shop
from ..database import get_db
from ..models.shop import Shop
from .schemas import (
    OrderBlockCreate,
    OrderBlockDeleteResponse,
    OrderBlockListResponse,
    OrderBlockResponse,
)
from .service import OrderBlockService, block_to_response

router = APIRouter(prefix="/order-blocks", tags=["order-blocks"])


@router.post("", response_model=OrderBlockResponse, status_code=status.HTTP_201_CREATED)
def create_order_block(
    data: OrderBlockCreate,
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
):
    """
    Create an order block with the next reference number.

    Returns:
        The block, including the customer link that carries its ID
    """
    block = OrderBlockService(db).create(shop.domain, data)
    return block_to_response(block)


@router.get("", response_model=OrderBlockListResponse)
def list_order_blocks(
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
):
    """List the shop's order blocks, newest first."""
    blocks = OrderBlockService(db).list(shop.domain)
    return OrderBlockListResponse(orders=[block_to_response(block) for block in blocks])


@router.get("/{block_id}", response_model=OrderBlockResponse)
def get_order_block(
    block_id: UUID,
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
):
    """
    Get one order block.

    Raises:
        NotFoundError: If the block does not exist or belongs to another shop
    """
    block = OrderBlockService(db).get_or_404(shop.domain, block_id)
    return block_to_response(block)


@router.delete("/{block_id}", response_model=OrderBlockDeleteResponse)
def delete_order_block(
    block_id: UUID,
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
):
    OrderBlockService(db).delete(shop.domain, block_id)
    return OrderBlockDeleteResponse()
