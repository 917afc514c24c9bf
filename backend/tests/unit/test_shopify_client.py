"""Unit tests for the Shopify Admin REST client

Tests cover:
- Request URL, headers and body wrapping
- Not-found handling for get and update
- Error mapping (Shopify errors, upstream failures, transport errors)
- GID helpers and shop domain normalization
"""

import json

import httpx
import pytest

from orderlink.shopify.client import ShopifyAdminClient, ShopifyApiError, normalize_shop_domain
from orderlink.shopify.gid import draft_order_gid, parse_gid


def make_client(handler) -> ShopifyAdminClient:
    return ShopifyAdminClient(
        "acme.myshopify.com",
        "shpat_secret",
        api_version="2024-10",
        transport=httpx.MockTransport(handler),
    )


class TestRequests:

    def test_create_draft_order_wraps_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["token"] = request.headers["X-Shopify-Access-Token"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"draft_order": {"id": 5, "invoice_url": "https://x/5"}})

        with make_client(handler) as client:
            draft_order = client.create_draft_order({"line_items": []})

        assert draft_order["id"] == 5
        assert seen["url"] == "https://acme.myshopify.com/admin/api/2024-10/draft_orders.json"
        assert seen["token"] == "shpat_secret"
        assert seen["body"] == {"draft_order": {"line_items": []}}

    def test_list_draft_orders_passes_limit_and_status(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"draft_orders": [{"id": 1}, {"id": 2}]})

        with make_client(handler) as client:
            draft_orders = client.list_draft_orders(limit=50, status="open")

        assert [d["id"] for d in draft_orders] == [1, 2]
        assert seen["params"] == {"limit": "50", "status": "open"}

    def test_get_and_update_return_none_on_404(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"errors": "Not Found"})

        with make_client(handler) as client:
            assert client.get_draft_order(9) is None
            assert client.update_draft_order(9, {"line_items": []}) is None

    def test_metafields(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/draft_orders/7/metafields.json")
            return httpx.Response(200, json={"metafields": [{"namespace": "custom_order"}]})

        with make_client(handler) as client:
            assert client.list_draft_order_metafields(7) == [{"namespace": "custom_order"}]


class TestErrors:

    def test_shopify_errors_become_400_with_json_message(self):
        errors = {"line_items": ["is invalid"]}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"errors": errors})

        with make_client(handler) as client:
            with pytest.raises(ShopifyApiError) as exc_info:
                client.create_draft_order({})

        assert exc_info.value.status_code == 400
        assert json.loads(exc_info.value.message) == errors
        assert exc_info.value.errors == errors

    def test_upstream_failure_becomes_502(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        with make_client(handler) as client:
            with pytest.raises(ShopifyApiError) as exc_info:
                client.list_draft_orders()

        assert exc_info.value.status_code == 502

    def test_transport_error_becomes_502(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(ShopifyApiError) as exc_info:
                client.get_draft_order(1)

        assert exc_info.value.status_code == 502

    def test_missing_draft_order_in_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        with make_client(handler) as client:
            with pytest.raises(ShopifyApiError):
                client.get_draft_order(1)


class TestHelpers:

    def test_gid_round_trip(self):
        assert draft_order_gid(42) == "gid://shopify/DraftOrder/42"
        assert parse_gid("gid://shopify/DraftOrder/42", "DraftOrder") == 42

    @pytest.mark.parametrize("gid", ["gid://shopify/Order/42", "gid://shopify/DraftOrder/abc", "", "42"])
    def test_parse_gid_rejects_other_values(self, gid):
        with pytest.raises(ValueError):
            parse_gid(gid, "DraftOrder")

    def test_normalize_shop_domain(self):
        assert normalize_shop_domain("https://Acme.myshopify.com/") == "acme.myshopify.com"
        with pytest.raises(ValueError):
            normalize_shop_domain("acme.example.com")
        with pytest.raises(ValueError):
            normalize_shop_domain(None)
