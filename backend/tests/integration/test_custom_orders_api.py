"""Integration tests for the custom order admin API

Tests cover:
- POST /api/v1/custom-orders for orders and templates
- Required field validation and Shopify error passthrough
- GET /api/v1/custom-orders/templates
- GET /api/v1/custom-orders/links
- Admin authentication
"""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from orderlink.models import AuditLog, DraftOrderLink

pytestmark = pytest.mark.integration

OPTION_GROUPS = [
    {"name": "Size", "values": [
        {"id": "s", "label": "Small", "price": "10"},
        {"id": "l", "label": "Large", "price": "15"},
    ]},
]


def order_body(**overrides):
    body = {
        "customerEmail": "jane@example.com",
        "customerName": "Jane Q Doe",
        "productTitle": "Engraved Mug",
        "note": "Gift wrap please",
        "optionGroups": OPTION_GROUPS,
        "productImage": "https://cdn.example.com/mug.png",
    }
    body.update(overrides)
    return body


def attribute(draft_order, name):
    return next((a["value"] for a in draft_order["note_attributes"] if a["name"] == name), None)


class TestCreateCustomOrder:
    """Test POST /api/v1/custom-orders"""

    def test_creates_draft_order_and_link(self, authenticated_client: TestClient, db_session: Session, fake_shopify):
        response = authenticated_client.post("/api/v1/custom-orders", json=order_body())

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        token = data["token"]
        assert len(token) == 8
        assert data["customerLink"] == f"https://test-shop.myshopify.com/pages/custom-order?token={token}"

        draft_order = fake_shopify.draft_orders[data["draftOrder"]["id"]]
        assert draft_order["tags"] == f"custom, t_{token}"
        assert draft_order["note"] == "Gift wrap please"
        assert draft_order["use_customer_default_address"] is False
        assert draft_order["email"] == "jane@example.com"
        assert draft_order["customer"] == {"email": "jane@example.com", "first_name": "Jane", "last_name": "Q Doe"}
        assert draft_order["line_items"] == [
            {"title": "Engraved Mug", "quantity": 1, "price": "0.00", "custom": True}
        ]
        assert attribute(draft_order, "_title") == "Engraved Mug"
        assert attribute(draft_order, "_img") == "https://cdn.example.com/mug.png"
        assert attribute(draft_order, "_token") == token
        assert json.loads(attribute(draft_order, "_option_groups")) == OPTION_GROUPS

        link = db_session.query(DraftOrderLink).filter(DraftOrderLink.token == token).one()
        assert link.shop == "test-shop.myshopify.com"
        assert link.draft_order_id == draft_order["id"]
        assert link.is_purchased is False

        audit = db_session.query(AuditLog).filter(AuditLog.action == "CUSTOM_ORDER_CREATED").one()
        assert audit.entity_id == str(draft_order["id"])

    def test_single_word_name_has_empty_last_name(self, authenticated_client: TestClient, fake_shopify):
        response = authenticated_client.post("/api/v1/custom-orders", json=order_body(customerName="Cher"))

        draft_order = fake_shopify.draft_orders[response.json()["draftOrder"]["id"]]
        assert draft_order["customer"]["first_name"] == "Cher"
        assert draft_order["customer"]["last_name"] == ""

    def test_empty_option_groups_count_as_present(self, authenticated_client: TestClient):
        response = authenticated_client.post("/api/v1/custom-orders", json=order_body(optionGroups=[]))
        assert response.status_code == 200

    @pytest.mark.parametrize("field", ["customerEmail", "customerName", "productTitle", "optionGroups"])
    def test_missing_required_field(self, authenticated_client: TestClient, fake_shopify, field):
        body = order_body()
        del body[field]

        response = authenticated_client.post("/api/v1/custom-orders", json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing required fields"}
        assert fake_shopify.calls("POST") == []

    def test_blank_string_counts_as_missing(self, authenticated_client: TestClient):
        response = authenticated_client.post("/api/v1/custom-orders", json=order_body(customerEmail=""))
        assert response.status_code == 400

    def test_invalid_option_price_rejected(self, authenticated_client: TestClient):
        groups = [{"name": "Size", "values": [{"id": "s", "label": "Small", "price": "ten"}]}]
        response = authenticated_client.post("/api/v1/custom-orders", json=order_body(optionGroups=groups))
        assert response.status_code == 422

    def test_shopify_error_returned_as_400(self, authenticated_client: TestClient, db_session: Session, fake_shopify):
        errors = {"customer": ["email is invalid"]}
        fake_shopify.fail_next(422, {"errors": errors})

        response = authenticated_client.post("/api/v1/custom-orders", json=order_body())

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert json.loads(response.json()["error"]) == errors
        assert db_session.query(DraftOrderLink).count() == 0


class TestCreateTemplate:
    """Test POST /api/v1/custom-orders with isTemplate"""

    def test_creates_template(self, authenticated_client: TestClient, db_session: Session, fake_shopify):
        response = authenticated_client.post("/api/v1/custom-orders", json={
            "isTemplate": True,
            "templateName": "Mug template",
            "productTitle": "Engraved Mug",
            "optionGroups": OPTION_GROUPS,
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "isTemplate": True}

        draft_order = next(iter(fake_shopify.draft_orders.values()))
        assert draft_order["tags"] == "app_template"
        assert attribute(draft_order, "_template_name") == "Mug template"
        assert attribute(draft_order, "_token") is None
        assert draft_order["customer"] is None
        assert db_session.query(DraftOrderLink).count() == 0
        assert db_session.query(AuditLog).filter(AuditLog.action == "TEMPLATE_CREATED").count() == 1

    @pytest.mark.parametrize("missing", ["templateName", "productTitle"])
    def test_template_requires_name_and_title(self, authenticated_client: TestClient, missing):
        body = {"isTemplate": True, "templateName": "Mug template", "productTitle": "Engraved Mug"}
        del body[missing]

        response = authenticated_client.post("/api/v1/custom-orders", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Template Name and Product Title required"


class TestListTemplates:
    """Test GET /api/v1/custom-orders/templates"""

    def test_lists_open_templates_only(self, authenticated_client: TestClient, fake_shopify):
        fake_shopify.add_draft_order(
            tags="app_template",
            note_attributes=[
                {"name": "_template_name", "value": "Named"},
                {"name": "_title", "value": "Mug"},
                {"name": "_img", "value": "https://cdn/mug.png"},
                {"name": "_option_groups", "value": json.dumps(OPTION_GROUPS)},
            ],
        )
        fake_shopify.add_draft_order(tags="app_template", line_items=[{"title": "Line title", "price": "0.00"}])
        fake_shopify.add_draft_order(tags="app_template", line_items=[{"title": "", "price": "0.00"}])
        fake_shopify.add_draft_order(tags="custom, t_0a1b2c3d")
        fake_shopify.add_draft_order(tags="app_template", status="completed")

        response = authenticated_client.get("/api/v1/custom-orders/templates")

        assert response.status_code == 200
        templates = response.json()["templates"]
        assert [t["name"] for t in templates] == ["Named", "Line title", "Untitled Template"]
        assert templates[0]["optionGroups"] == OPTION_GROUPS
        assert templates[0]["productTitle"] == "Mug"
        assert templates[0]["img"] == "https://cdn/mug.png"
        assert fake_shopify.calls("GET")[0][1] == "draft_orders.json"


class TestListLinks:
    """Test GET /api/v1/custom-orders/links"""

    def test_lists_links_newest_first(self, authenticated_client: TestClient):
        first = authenticated_client.post("/api/v1/custom-orders", json=order_body()).json()
        second = authenticated_client.post("/api/v1/custom-orders", json=order_body()).json()

        response = authenticated_client.get("/api/v1/custom-orders/links")

        assert response.status_code == 200
        links = response.json()["links"]
        assert [link["token"] for link in links] == [second["token"], first["token"]]
        assert links[0]["customerLink"] == second["customerLink"]
        assert links[0]["isPurchased"] is False


class TestAdminAuthentication:

    def test_missing_token_rejected(self, client: TestClient, test_shop):
        response = client.post("/api/v1/custom-orders", json=order_body())
        assert response.status_code in (401, 403)

    def test_invalid_token_rejected(self, client: TestClient, test_shop):
        response = client.get(
            "/api/v1/custom-orders/links",
            headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_token_for_unknown_shop_rejected(self, client: TestClient, test_shop):
        from orderlink.auth.jwt import create_shop_token

        response = client.get(
            "/api/v1/custom-orders/links",
            headers={"Authorization": f"Bearer {create_shop_token('other-shop.myshopify.com')}"}
        )
        assert response.status_code == 401
