"""Pydantic schemas for the custom order API

Field names follow the admin form and storefront page (camelCase on the wire).
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


# ============================================================================
# Option Groups
# ============================================================================

class OptionValue(BaseModel):
    """Selectable value with its price delta"""
    id: str
    label: str = ""
    price: str = "0"

    model_config = ConfigDict(extra='ignore')

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise ValueError("Option value id is required")
        return str(value).strip()

    @field_validator('label', mode='before')
    @classmethod
    def coerce_label(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator('price', mode='before')
    @classmethod
    def normalize_price(cls, value: Any) -> str:
        """Missing or blank prices become "0"; anything else must be a finite number."""
        if value is None or isinstance(value, bool):
            return "0"
        text = str(value).strip()
        if not text:
            return "0"
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Price must be a number, got {text!r}")
        if not amount.is_finite():
            raise ValueError(f"Price must be a number, got {text!r}")
        return text


class OptionGroup(BaseModel):
    """Named set of selectable values"""
    name: str
    values: List[OptionValue] = Field(default_factory=list)

    model_config = ConfigDict(extra='ignore')

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Option group name cannot be empty")
        return value.strip()


OPTION_GROUPS_ADAPTER = TypeAdapter(List[OptionGroup])


def ensure_unique_group_names(groups: Optional[List[OptionGroup]]) -> Optional[List[OptionGroup]]:
    """Selections are keyed by group name, so names must not repeat."""
    if groups:
        seen = set()
        for group in groups:
            if group.name in seen:
                raise ValueError(f"Duplicate option group name: {group.name}")
            seen.add(group.name)
    return groups


# ============================================================================
# Admin: custom orders and templates
# ============================================================================

class CreateCustomOrderRequest(BaseModel):
    """Request for POST /custom-orders

    Required fields depend on is_template and are checked by the service so
    the form gets the same error messages it always has.
    """
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_name: Optional[str] = Field(None, alias="customerName")
    product_title: Optional[str] = Field(None, alias="productTitle")
    note: Optional[str] = None
    option_groups: Optional[List[OptionGroup]] = Field(None, alias="optionGroups")
    product_image: Optional[str] = Field(None, alias="productImage")
    product_video: Optional[str] = Field(None, alias="productVideo")
    is_template: bool = Field(False, alias="isTemplate")
    template_name: Optional[str] = Field(None, alias="templateName")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('option_groups')
    @classmethod
    def unique_group_names(cls, value: Optional[List[OptionGroup]]) -> Optional[List[OptionGroup]]:
        return ensure_unique_group_names(value)


class TemplateItem(BaseModel):
    id: int
    name: str
    option_groups: List[OptionGroup] = Field(default_factory=list, alias="optionGroups")
    product_title: Optional[str] = Field(None, alias="productTitle")
    img: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class TemplateListResponse(BaseModel):
    success: bool = True
    templates: List[TemplateItem] = Field(default_factory=list)


class DraftOrderLinkItem(BaseModel):
    token: str
    draft_order_id: int = Field(..., alias="draftOrderId")
    is_purchased: bool = Field(False, alias="isPurchased")
    customer_link: str = Field(..., alias="customerLink")
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


class DraftOrderLinkListResponse(BaseModel):
    success: bool = True
    links: List[DraftOrderLinkItem] = Field(default_factory=list)


# ============================================================================
# Storefront: checkout
# ============================================================================

class CheckoutRequest(BaseModel):
    """Request for POST /api/process-checkout

    ``selections`` maps option group name to the chosen value id. The legacy
    ``variantName``/``price`` pair is still accepted for single-group orders.
    """
    token: Optional[str] = None
    shop: Optional[str] = None
    selections: Dict[str, Union[str, int]] = Field(default_factory=dict)
    draft_order_id: Optional[Union[int, str]] = Field(None, alias="draftOrderId")
    variant_name: Optional[str] = Field(None, alias="variantName")
    price: Optional[Union[str, int, float]] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('selections', mode='before')
    @classmethod
    def default_selections(cls, value: Any) -> Any:
        return {} if value is None else value
