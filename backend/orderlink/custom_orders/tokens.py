"""Link keys, tokens and draft order tags.

A customer link carries one ``token`` query parameter. Three kinds of key
are in circulation:

    token            8 lowercase hex chars, tagged on the draft order as t_<token>
    order block ID   UUID of an OrderBlock row
    reference        npdfNNN reference of an OrderBlock row
"""

import re
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union
from urllib.parse import quote
from uuid import UUID

from ..config import settings
from ..errors import InvalidRequestError

TOKEN_TAG_PREFIX = "t_"
CUSTOM_TAG = "custom"
TEMPLATE_TAG = "app_template"
ORDER_BLOCK_TAG = "order-block"
ORDER_BLOCK_ID_TAG_PREFIX = "draft-order-app-id-"

TOKEN_PATTERN = re.compile(r"^[0-9a-f]{8}$")
REFERENCE_PATTERN = re.compile(r"^npdf\d{3,}$")


def generate_token() -> str:
    """Four random bytes, hex encoded."""
    return secrets.token_hex(4)


def token_tag(token: str) -> str:
    return f"{TOKEN_TAG_PREFIX}{token}"


def order_block_tag(block_id: Union[UUID, str]) -> str:
    return f"{ORDER_BLOCK_ID_TAG_PREFIX}{block_id}"


def parse_tags(tags: Any) -> List[str]:
    """Normalize tags to a list.

    Shopify sends tags as a comma-separated string on REST resources and
    webhooks; some callers already hold a list.
    """
    if not tags:
        return []
    if isinstance(tags, str):
        items = tags.split(",")
    elif isinstance(tags, (list, tuple)):
        items = [str(tag) for tag in tags]
    else:
        return []
    return [tag.strip() for tag in items if tag and tag.strip()]


def has_tag(tags: Any, tag: str) -> bool:
    return tag in parse_tags(tags)


def find_token_in_tags(tags: Any) -> Optional[str]:
    for tag in parse_tags(tags):
        if tag.startswith(TOKEN_TAG_PREFIX):
            candidate = tag[len(TOKEN_TAG_PREFIX):]
            if TOKEN_PATTERN.match(candidate):
                return candidate
    return None


def find_order_block_id_in_tags(tags: Any) -> Optional[str]:
    """Raw value of the draft-order-app-id-<id> tag, unvalidated."""
    for tag in parse_tags(tags):
        if tag.startswith(ORDER_BLOCK_ID_TAG_PREFIX):
            return tag[len(ORDER_BLOCK_ID_TAG_PREFIX):]
    return None


class LinkKeyKind(str, Enum):
    TOKEN = "token"
    ORDER_BLOCK_ID = "order_block_id"
    REFERENCE = "reference"


@dataclass(frozen=True)
class LinkKey:
    kind: LinkKeyKind
    value: str

    @property
    def block_id(self) -> UUID:
        return UUID(self.value)


def classify_link_key(raw: Optional[str]) -> LinkKey:
    """Work out which kind of key a customer link carries.

    Raises:
        InvalidRequestError: If the key matches none of the known formats
    """
    value = (raw or "").strip()
    lowered = value.lower()
    if TOKEN_PATTERN.match(lowered):
        return LinkKey(LinkKeyKind.TOKEN, lowered)
    if REFERENCE_PATTERN.match(lowered):
        return LinkKey(LinkKeyKind.REFERENCE, lowered)
    try:
        return LinkKey(LinkKeyKind.ORDER_BLOCK_ID, str(UUID(value)))
    except ValueError:
        raise InvalidRequestError("Invalid order token")


def customer_link(shop: str, key: Union[str, UUID]) -> str:
    return f"https://{shop}{settings.CUSTOMER_PAGE_PATH}?token={quote(str(key))}"
