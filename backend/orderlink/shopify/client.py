"""Shopify Admin REST API client.

Thin wrapper over httpx covering the draft order calls OrderLink makes.
Errors are raised as ShopifyApiError and carry the HTTP status the API layer
should answer with: 400 for requests Shopify rejected, 502 for transport
failures and upstream server errors.
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..models.shop import SHOP_DOMAIN_PATTERN
from ..observability.logging_config import get_logger
from ..observability.metrics import shopify_api_calls_total

logger = get_logger(__name__)


class ShopifyApiError(RuntimeError):
    """Raised when an Admin API call fails."""

    def __init__(self, *, message: str, status_code: int = 502, errors: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


def normalize_shop_domain(shop: Optional[str]) -> str:
    """Normalize a shop parameter to its bare myshopify domain.

    Accepts values such as ``https://Acme.myshopify.com/``.

    Raises:
        ValueError: If the result is not a myshopify domain
    """
    domain = (shop or "").strip().lower()
    for scheme in ("https://", "http://"):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
    domain = domain.rstrip("/")
    if not SHOP_DOMAIN_PATTERN.match(domain):
        raise ValueError(f"Invalid shop domain: {shop!r}")
    return domain


class ShopifyAdminClient:
    """Admin REST client bound to one shop and access token."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.shop_domain = shop_domain
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self._client = httpx.Client(
            base_url=f"https://{shop_domain}/admin/api/{self.api_version}/",
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout if timeout is not None else settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ShopifyAdminClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Draft orders
    # ------------------------------------------------------------------

    def create_draft_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("POST", "draft_orders.json", json_body={"draft_order": payload})
        return self._unwrap_draft_order(data)

    def update_draft_order(self, draft_order_id: int, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a draft order in place.

        Returns:
            The updated draft order, or None if it no longer exists
        """
        data = self._request(
            "PUT",
            f"draft_orders/{int(draft_order_id)}.json",
            json_body={"draft_order": payload},
            allow_not_found=True,
        )
        if data is None:
            return None
        return self._unwrap_draft_order(data)

    def get_draft_order(self, draft_order_id: int) -> Optional[Dict[str, Any]]:
        data = self._request("GET", f"draft_orders/{int(draft_order_id)}.json", allow_not_found=True)
        if data is None:
            return None
        return self._unwrap_draft_order(data)

    def list_draft_orders(self, limit: int = 250, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """List draft orders, most recent page only (Shopify caps limit at 250)."""
        params: Dict[str, Any] = {"limit": limit}
        if status:
            params["status"] = status
        data = self._request("GET", "draft_orders.json", params=params)
        return list(data.get("draft_orders") or [])

    def list_draft_order_metafields(self, draft_order_id: int) -> List[Dict[str, Any]]:
        data = self._request("GET", f"draft_orders/{int(draft_order_id)}/metafields.json")
        return list(data.get("metafields") or [])

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    @staticmethod
    def _unwrap_draft_order(data: Dict[str, Any]) -> Dict[str, Any]:
        draft_order = data.get("draft_order")
        if not isinstance(draft_order, dict):
            raise ShopifyApiError(message="Shopify response is missing draft_order")
        return draft_order

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Optional[Dict[str, Any]]:
        try:
            response = self._client.request(method, path, params=params, json=json_body)
        except httpx.HTTPError as exc:
            shopify_api_calls_total.labels(method=method, outcome="error").inc()
            logger.error(
                f"Shopify request failed: {method} {path}",
                extra={"shop": self.shop_domain, "error_type": type(exc).__name__},
            )
            raise ShopifyApiError(message=f"Shopify request failed: {exc}") from exc

        if response.status_code == 404 and allow_not_found:
            shopify_api_calls_total.labels(method=method, outcome="not_found").inc()
            return None

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        errors = data.get("errors")
        if response.is_success and not errors:
            shopify_api_calls_total.labels(method=method, outcome="success").inc()
            return data

        shopify_api_calls_total.labels(method=method, outcome="error").inc()
        logger.warning(
            f"Shopify returned HTTP {response.status_code} for {method} {path}",
            extra={"shop": self.shop_domain, "status_code": response.status_code},
        )
        message = json.dumps(errors) if errors else f"Shopify returned HTTP {response.status_code}"
        status_code = 502 if response.status_code >= 500 else 400
        raise ShopifyApiError(message=message, status_code=status_code, errors=errors)
