"""Pydantic schemas for the Order Blocks API"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..custom_orders.schemas import OptionGroup, ensure_unique_group_names


class OrderBlockCreate(BaseModel):
    """Request for POST /order-blocks"""
    product_title: str = Field(..., alias="productTitle", min_length=1)
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_name: Optional[str] = Field(None, alias="customerName")
    note: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    video_url: Optional[str] = Field(None, alias="videoUrl")
    option_groups: List[OptionGroup] = Field(default_factory=list, alias="optionGroups")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('product_title')
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Product title cannot be empty")
        return value.strip()

    @field_validator('images')
    @classmethod
    def drop_blank_images(cls, value: List[str]) -> List[str]:
        return [url.strip() for url in value if url and url.strip()]

    @field_validator('option_groups')
    @classmethod
    def unique_group_names(cls, value: List[OptionGroup]) -> List[OptionGroup]:
        return ensure_unique_group_names(value)


class OrderBlockResponse(BaseModel):
    """Order block as returned by the admin API"""
    id: str
    reference: str
    product_title: str = Field(..., alias="productTitle")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_name: Optional[str] = Field(None, alias="customerName")
    note: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    video_url: Optional[str] = Field(None, alias="videoUrl")
    option_groups: List[OptionGroup] = Field(default_factory=list, alias="optionGroups")
    total_price: Optional[str] = Field(None, alias="totalPrice")
    shopify_draft_order_id: Optional[str] = Field(None, alias="shopifyDraftOrderId")
    invoice_url: Optional[str] = Field(None, alias="invoiceUrl")
    is_purchased: bool = Field(False, alias="isPurchased")
    customer_link: str = Field(..., alias="customerLink")
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class OrderBlockListResponse(BaseModel):
    success: bool = True
    orders: List[OrderBlockResponse] = Field(default_factory=list)


class OrderBlockDeleteResponse(BaseModel):
    success: bool = True
