"""Draft order note attribute codec.

Custom order data rides on the draft order itself as ``note_attributes``:

    _title           product title
    _img             image URL, "" or legacy "yes" (URL lives in a metafield)
    _video           video URL
    _option_groups   JSON [{name, values: [{id, label, price}]}]
    _token           customer link token
    _template_name   template name (app_template drafts)
    _variants        legacy JSON [{id, name, price}], read only
    _order_block_id  order block that owns the draft
    _reference       order block reference (npdfNNN)

Readers are tolerant by default: a missing or malformed attribute never
fails a display request. Pricing reads option groups with ``strict=True``.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from ..errors import InvalidRequestError
from ..observability.logging_config import get_logger
from .schemas import OPTION_GROUPS_ADAPTER, OptionGroup

logger = get_logger(__name__)

TITLE = "_title"
IMAGE = "_img"
VIDEO = "_video"
OPTION_GROUPS = "_option_groups"
TOKEN = "_token"
TEMPLATE_NAME = "_template_name"
LEGACY_VARIANTS = "_variants"
ORDER_BLOCK_ID = "_order_block_id"
REFERENCE = "_reference"

LEGACY_IMAGE_FLAG = "yes"
IMAGE_METAFIELD_NAMESPACE = "custom_order"
IMAGE_METAFIELD_KEY = "product_image"
LEGACY_GROUP_NAME = "Option"
INVALID_OPTIONS_MESSAGE = "Order options are invalid"


def get_note_attribute(draft_order: Dict[str, Any], name: str) -> Optional[str]:
    for attribute in draft_order.get("note_attributes") or []:
        if attribute.get("name") == name:
            return attribute.get("value")
    return None


def clean_option_groups(groups: Iterable[Union[OptionGroup, Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Reduce option groups to {name, values: [{id, label, price}]}.

    Raises:
        pydantic.ValidationError: If a group or value is malformed
    """
    validated = OPTION_GROUPS_ADAPTER.validate_python(
        [g.model_dump() if isinstance(g, OptionGroup) else g for g in groups or []]
    )
    return [group.model_dump() for group in validated]


def build_note_attributes(
    title: str,
    image: Optional[str],
    option_groups: List[Dict[str, Any]],
    video: Optional[str] = None,
    extra: Optional[Dict[str, str]] = None,
) -> List[Dict[str, str]]:
    attributes = [
        {"name": TITLE, "value": title},
        {"name": IMAGE, "value": image or ""},
        {"name": OPTION_GROUPS, "value": json.dumps(option_groups)},
    ]
    if video:
        attributes.append({"name": VIDEO, "value": video})
    for name, value in (extra or {}).items():
        attributes.append({"name": name, "value": value})
    return attributes


def _malformed(label: str, exc: Exception, strict: bool) -> List[Dict[str, Any]]:
    if strict:
        raise InvalidRequestError(INVALID_OPTIONS_MESSAGE) from exc
    logger.warning(f"Ignoring malformed {label}: {exc}")
    return []


def parse_option_groups(raw: Optional[str], strict: bool = False) -> List[Dict[str, Any]]:
    """Decode an ``_option_groups`` value.

    Malformed data yields [] unless ``strict`` is set, in which case it
    raises InvalidRequestError. Checkout reads strictly.
    """
    if not raw:
        return []
    try:
        return clean_option_groups(json.loads(raw))
    except (ValueError, TypeError, ValidationError) as exc:
        return _malformed("option groups", exc, strict)


def parse_legacy_variants(raw: Optional[str], strict: bool = False) -> List[Dict[str, Any]]:
    """Read a legacy ``_variants`` list as a single option group.

    [{id, name, price}] becomes [{name: "Option", values: [{id, label: name, price}]}].
    """
    if not raw:
        return []
    try:
        variants = json.loads(raw)
        if not isinstance(variants, list):
            raise ValueError("Legacy variants must be a list")
        if not variants:
            return []
        values = [
            {"id": v.get("id"), "label": v.get("name"), "price": v.get("price")}
            for v in variants
            if isinstance(v, dict)
        ]
        return clean_option_groups([{"name": LEGACY_GROUP_NAME, "values": values}])
    except (ValueError, TypeError, ValidationError) as exc:
        return _malformed("legacy variants", exc, strict)


def option_groups_from_draft_order(draft_order: Dict[str, Any], strict: bool = False) -> List[Dict[str, Any]]:
    raw_groups = get_note_attribute(draft_order, OPTION_GROUPS)
    if raw_groups is not None:
        return parse_option_groups(raw_groups, strict=strict)
    return parse_legacy_variants(get_note_attribute(draft_order, LEGACY_VARIANTS), strict=strict)


def first_line_item_title(draft_order: Dict[str, Any]) -> Optional[str]:
    line_items = draft_order.get("line_items") or []
    if line_items and isinstance(line_items[0], dict):
        return line_items[0].get("title") or None
    return None


def product_title_from_draft_order(draft_order: Dict[str, Any], default: str = "Custom Order") -> str:
    return get_note_attribute(draft_order, TITLE) or first_line_item_title(draft_order) or default


def image_metafield_value(metafields: List[Dict[str, Any]]) -> Optional[str]:
    for metafield in metafields:
        if (
            metafield.get("namespace") == IMAGE_METAFIELD_NAMESPACE
            and metafield.get("key") == IMAGE_METAFIELD_KEY
        ):
            return metafield.get("value")
    return None
