"""Draft order payload builders shared by custom orders and order blocks."""

from typing import Any, Dict, List, Optional


def split_customer_name(name: str) -> Dict[str, str]:
    """Split a full name on the first whitespace run; last name may be empty."""
    parts = (name or "").strip().split(None, 1)
    return {
        "first_name": parts[0] if parts else "",
        "last_name": parts[1] if len(parts) > 1 else "",
    }


def customer_payload(email: str, name: Optional[str]) -> Dict[str, str]:
    return {"email": email, **split_customer_name(name or "")}


def placeholder_line_item(title: str) -> Dict[str, Any]:
    """Zero priced line item used until the customer picks options."""
    return {
        "title": title,
        "quantity": 1,
        "price": "0.00",
        "custom": True,
    }


def build_draft_order_payload(
    line_item: Dict[str, Any],
    tags: List[str],
    note: Optional[str],
    note_attributes: List[Dict[str, str]],
    customer_email: Optional[str] = None,
    customer_name: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "line_items": [line_item],
        "tags": ",".join(tags),
        "note": note or "",
        "note_attributes": note_attributes,
        "use_customer_default_address": False,
    }
    if customer_email:
        payload["customer"] = customer_payload(customer_email, customer_name)
        payload["email"] = customer_email
    return payload
