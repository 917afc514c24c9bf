"""Option selection and line item pricing.

The checkout price is always computed here from the stored option groups;
prices sent by the storefront are never trusted.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from ..errors import InvalidRequestError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class SelectedOption:
    group: str
    value_id: str
    label: str
    price: Decimal


def parse_price(value: Any) -> Decimal:
    """Parse a price delta; missing or blank means zero.

    Raises:
        InvalidRequestError: If the value is not a finite number
    """
    if value is None:
        return Decimal("0")
    text = str(value).strip()
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidRequestError(f"Invalid price: {text}")
    if not amount.is_finite():
        raise InvalidRequestError(f"Invalid price: {text}")
    return amount


def format_price(amount: Decimal) -> str:
    return str(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def select_options(
    option_groups: List[Dict[str, Any]],
    selections: Optional[Dict[str, Any]],
) -> List[SelectedOption]:
    """Match selections against option groups.

    Every group with values needs exactly one selection; groups without
    values are skipped.

    Args:
        option_groups: Clean option groups [{name, values: [{id, label, price}]}]
        selections: Group name -> chosen value id

    Returns:
        Selected options in option group order

    Raises:
        InvalidRequestError: Unknown group, unknown value, or missing selection
    """
    chosen = {str(name): str(value_id) for name, value_id in (selections or {}).items()}

    group_names = {group.get("name") for group in option_groups}
    for name in chosen:
        if name not in group_names:
            raise InvalidRequestError(f"Unknown option group: {name}")

    selected = []
    for group in option_groups:
        values = group.get("values") or []
        if not values:
            continue
        name = group.get("name")
        value_id = chosen.get(name)
        if value_id is None:
            raise InvalidRequestError(f"No option selected for {name}")
        match = next((v for v in values if str(v.get("id")) == value_id), None)
        if match is None:
            raise InvalidRequestError(f"Unknown option {value_id} for {name}")
        selected.append(SelectedOption(
            group=name,
            value_id=value_id,
            label=match.get("label") or "",
            price=parse_price(match.get("price")),
        ))
    return selected


def total_price(selected: List[SelectedOption]) -> Decimal:
    total = sum((option.price for option in selected), Decimal("0"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def line_item_title(product_title: str, selected: List[SelectedOption]) -> str:
    labels = [option.label for option in selected if option.label]
    if not labels:
        return product_title
    return f"{product_title} - {' / '.join(labels)}"


def build_line_item(product_title: str, selected: List[SelectedOption]) -> Dict[str, Any]:
    """Custom draft order line item for the selected options.

    Raises:
        InvalidRequestError: If the selected options add up to a negative total
    """
    amount = total_price(selected)
    if amount < 0:
        raise InvalidRequestError("Order total cannot be negative")
    return {
        "title": line_item_title(product_title, selected),
        "price": format_price(amount),
        "quantity": 1,
        "custom": True,
        "properties": [{"name": option.group, "value": option.label} for option in selected],
    }


def selection_from_legacy_variant(
    option_groups: List[Dict[str, Any]],
    variant_name: Optional[str],
    price: Any,
) -> Dict[str, str]:
    """Translate a legacy variantName/price pair into a selection.

    Only single-group orders had variants, and the pair must match one value
    exactly, so the price still comes from the stored groups.

    Raises:
        InvalidRequestError: If the pair does not identify a stored value
    """
    groups = [group for group in option_groups if group.get("values")]
    if len(groups) != 1:
        raise InvalidRequestError("Option selections are required")
    group = groups[0]
    requested_price = parse_price(price)
    for value in group["values"]:
        if value.get("label") == variant_name and parse_price(value.get("price")) == requested_price:
            return {group["name"]: str(value["id"])}
    raise InvalidRequestError("Selected variant does not match this order")
