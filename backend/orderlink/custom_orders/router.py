"""Custom order admin API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_shop
from ..database import get_db
from ..dependencies import get_admin_client
from ..models.shop import Shop
from ..shopify.client import ShopifyAdminClient
from .schemas import CreateCustomOrderRequest, DraftOrderLinkListResponse, TemplateListResponse
from .service import CustomOrderService

router = APIRouter(prefix="/custom-orders", tags=["custom-orders"])


@router.post("")
def create_custom_order(
    body: CreateCustomOrderRequest,
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
    client: ShopifyAdminClient = Depends(get_admin_client),
):
    """
    Create a custom order or template as a Shopify draft order.

    Returns:
        {success, draftOrder, customerLink, token} for orders,
        {success, isTemplate} for templates

    Raises:
        InvalidRequestError: If required fields are missing
        ShopifyApiError: If Shopify rejects the draft order
    """
    return CustomOrderService(db, client).create_custom_order(shop.domain, body)


@router.get("/templates", response_model=TemplateListResponse)
def list_templates(
    db: Session = Depends(get_db),
    client: ShopifyAdminClient = Depends(get_admin_client),
):
    """List saved templates (open draft orders tagged app_template)."""
    return TemplateListResponse(templates=CustomOrderService(db, client).list_templates())


@router.get("/links", response_model=DraftOrderLinkListResponse)
def list_links(
    db: Session = Depends(get_db),
    shop: Shop = Depends(get_current_shop),
    client: ShopifyAdminClient = Depends(get_admin_client),
):
    """List the shop's customer links, newest first."""
    return DraftOrderLinkListResponse(links=CustomOrderService(db, client).list_links(shop.domain))
