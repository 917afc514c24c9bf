"""Pytest fixtures for OrderLink tests.

Provides reusable test fixtures for:
- In-memory SQLite database session (tables created and dropped per test)
- An installed test shop
- A fake Shopify Admin API (httpx.MockTransport)
- Unauthenticated and authenticated test clients

Usage:
    def test_list_order_blocks(authenticated_client):
        response = authenticated_client.get("/api/v1/order-blocks")
        assert response.status_code == 200
"""

import os

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")
os.environ.pop("SHOPIFY_ACCESS_TOKEN", None)

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from orderlink.auth.jwt import create_shop_token
from orderlink.database import get_db
from orderlink.dependencies import get_shopify_transport
from orderlink.models import Base, Shop
from tests.fixtures.fake_shopify import FakeShopify

TEST_SHOP_DOMAIN = "test-shop.myshopify.com"

# One shared in-memory connection so the app and the test see the same data
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def test_shop(db_session: Session) -> Shop:
    """Installed shop with an Admin API token."""
    shop = Shop(domain=TEST_SHOP_DOMAIN, access_token="shpat_test_token", scope="write_draft_orders")
    db_session.add(shop)
    db_session.commit()
    db_session.refresh(shop)
    return shop


@pytest.fixture(scope="function")
def fake_shopify() -> FakeShopify:
    return FakeShopify(shop=TEST_SHOP_DOMAIN)


@pytest.fixture(scope="function")
def client(db_session: Session, fake_shopify: FakeShopify) -> Generator[TestClient, None, None]:
    """Create an unauthenticated test client.

    Database and Shopify dependencies point at the test session and the fake
    Admin API.
    """
    from orderlink.main import create_app

    app = create_app()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_shopify_transport] = fake_shopify.transport

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, test_shop: Shop) -> TestClient:
    """Test client with an admin bearer token for the test shop."""
    client.headers.update({"Authorization": f"Bearer {create_shop_token(test_shop.domain)}"})
    return client
