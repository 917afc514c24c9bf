"""Shopify global ID helpers (gid://shopify/<Resource>/<id>)."""

from typing import Union

_GID_PREFIX = "gid://shopify/"


def to_gid(resource: str, numeric_id: Union[int, str]) -> str:
    return f"{_GID_PREFIX}{resource}/{int(numeric_id)}"


def draft_order_gid(numeric_id: Union[int, str]) -> str:
    """Build the DraftOrder GID for a REST draft order ID."""
    return to_gid("DraftOrder", numeric_id)


def parse_gid(gid: str, resource: str) -> int:
    """Return the numeric ID of a GID of the given resource type.

    Args:
        gid: Global ID, e.g. gid://shopify/DraftOrder/1234
        resource: Expected resource type, e.g. DraftOrder

    Returns:
        int: The numeric REST ID

    Raises:
        ValueError: If the GID is malformed or names another resource
    """
    prefix = f"{_GID_PREFIX}{resource}/"
    if not gid or not gid.startswith(prefix):
        raise ValueError(f"Not a {resource} GID: {gid!r}")
    tail = gid[len(prefix):]
    if not tail.isdigit():
        raise ValueError(f"Not a {resource} GID: {gid!r}")
    return int(tail)
