"""Per-request log context.

The request ID and the shop a request acts for are held in context variables
so every log line written while handling the request can carry them, across
threadpool hops and awaits alike.
"""

from contextvars import ContextVar
from typing import Optional
from uuid import uuid4

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_shop: ContextVar[Optional[str]] = ContextVar("shop", default=None)

NO_REQUEST_ID = "no-request-id"


def new_request_id() -> str:
    return uuid4().hex


def bind_request(request_id: str, shop: Optional[str] = None) -> None:
    """Bind the current request's ID and shop (if known) to the context."""
    _request_id.set(request_id)
    _shop.set(shop)


def current_request_id() -> str:
    return _request_id.get() or NO_REQUEST_ID


def current_shop() -> Optional[str]:
    return _shop.get()
