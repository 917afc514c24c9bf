"""In-memory Shopify Admin REST API for tests.

Serves the draft order endpoints the app uses through an httpx.MockTransport,
so the real ShopifyAdminClient (URL building, error mapping, metrics) runs
unchanged in tests.

Usage:
    def test_checkout(client, fake_shopify):
        draft = fake_shopify.add_draft_order(tags="custom, t_0a1b2c3d")
        ...
        assert fake_shopify.draft_orders[draft["id"]]["line_items"][0]["price"] == "25.00"
"""

import json
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import httpx

_PATH_PATTERN = re.compile(r"^/admin/api/[^/]+/(?P<rest>.+)$")
_DRAFT_ORDER_PATTERN = re.compile(r"^draft_orders/(?P<id>\d+)\.json$")
_METAFIELDS_PATTERN = re.compile(r"^draft_orders/(?P<id>\d+)/metafields\.json$")


def _total(line_items: List[Dict[str, Any]]) -> str:
    total = sum(
        (Decimal(str(item.get("price") or "0")) * int(item.get("quantity") or 1) for item in line_items),
        Decimal("0"),
    )
    return str(total.quantize(Decimal("0.01")))


def _tags_string(tags: Any) -> str:
    if isinstance(tags, list):
        items = tags
    else:
        items = (tags or "").split(",")
    return ", ".join(tag.strip() for tag in items if tag.strip())


class FakeShopify:
    """Draft order store keyed by numeric ID."""

    def __init__(self, shop: str = "test-shop.myshopify.com"):
        self.shop = shop
        self.draft_orders: Dict[int, Dict[str, Any]] = {}
        self.metafields: Dict[int, List[Dict[str, Any]]] = {}
        self.requests: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self._next_id = 1001
        self._failures: List[httpx.Response] = []

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def add_draft_order(self, **fields) -> Dict[str, Any]:
        """Seed a draft order directly, bypassing the API."""
        draft_id = fields.pop("id", None) or self._allocate_id()
        draft_order = self._build(draft_id, fields)
        self.draft_orders[draft_id] = draft_order
        return draft_order

    def fail_next(self, status_code: int, body: Any = None) -> None:
        """Answer the next request with this status instead of serving it."""
        self._failures.append(httpx.Response(status_code, json=body if body is not None else {}))

    def calls(self, method: str) -> List[Tuple[str, str, Optional[Dict[str, Any]]]]:
        return [call for call in self.requests if call[0] == method]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        match = _PATH_PATTERN.match(request.url.path)
        path = match.group("rest") if match else request.url.path
        self.requests.append((request.method, path, body))

        if self._failures:
            return self._failures.pop(0)

        if path == "draft_orders.json":
            if request.method == "POST":
                return self._create(body["draft_order"])
            if request.method == "GET":
                return self._list(request.url.params)

        metafields_match = _METAFIELDS_PATTERN.match(path)
        if metafields_match and request.method == "GET":
            return httpx.Response(
                200, json={"metafields": self.metafields.get(int(metafields_match.group("id")), [])}
            )

        draft_match = _DRAFT_ORDER_PATTERN.match(path)
        if draft_match:
            draft_order = self.draft_orders.get(int(draft_match.group("id")))
            if draft_order is None:
                return httpx.Response(404, json={"errors": "Not Found"})
            if request.method == "GET":
                return httpx.Response(200, json={"draft_order": draft_order})
            if request.method == "PUT":
                return self._update(draft_order, body["draft_order"])

        return httpx.Response(404, json={"errors": "Not Found"})

    def _allocate_id(self) -> int:
        draft_id = self._next_id
        self._next_id += 1
        return draft_id

    def _build(self, draft_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        line_items = fields.get("line_items") or [
            {"title": "Custom Order", "price": "0.00", "quantity": 1, "custom": True}
        ]
        draft_order = {
            "id": draft_id,
            "name": f"#D{draft_id}",
            "status": "open",
            "note": "",
            "note_attributes": [],
            "email": None,
            "customer": None,
            "currency": "USD",
            "invoice_url": f"https://{self.shop}/invoices/{draft_id}",
        }
        draft_order.update(fields)
        draft_order["line_items"] = line_items
        draft_order["tags"] = _tags_string(fields.get("tags"))
        draft_order["total_price"] = _total(line_items)
        return draft_order

    def _create(self, payload: Dict[str, Any]) -> httpx.Response:
        draft_order = self.add_draft_order(**payload)
        return httpx.Response(201, json={"draft_order": draft_order})

    def _list(self, params: httpx.QueryParams) -> httpx.Response:
        limit = int(params.get("limit", 50))
        status = params.get("status")
        draft_orders = [
            draft_order for draft_order in self.draft_orders.values()
            if status is None or draft_order["status"] == status
        ]
        return httpx.Response(200, json={"draft_orders": draft_orders[:limit]})

    def _update(self, draft_order: Dict[str, Any], payload: Dict[str, Any]) -> httpx.Response:
        for key, value in payload.items():
            if key == "tags":
                value = _tags_string(value)
            draft_order[key] = value
        draft_order["total_price"] = _total(draft_order["line_items"])
        return httpx.Response(200, json={"draft_order": draft_order})
