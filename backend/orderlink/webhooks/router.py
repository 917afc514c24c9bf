"""Shopify webhook endpoints"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from .handlers import WebhookHandler

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def _read_payload(request: Request):
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        # Rejected by the handler as a missing payload
        return None


def _respond(db: Session, topic: Optional[str], shop: Optional[str], payload) -> JSONResponse:
    result = WebhookHandler(db).handle(topic, shop, payload)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("")
async def receive_webhook(
    request: Request,
    x_shopify_topic: Optional[str] = Header(None),
    x_shopify_shop_domain: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Receive a webhook; the topic comes from X-Shopify-Topic.

    Rejections (invalid JSON, missing payload, id or shop, unhandled topic)
    answer {"message": ...} with a 400 or 404.
    """
    payload = await _read_payload(request)
    return _respond(db, x_shopify_topic, x_shopify_shop_domain, payload)


@router.post("/{resource}/{event}")
async def receive_webhook_by_path(
    resource: str,
    event: str,
    request: Request,
    x_shopify_shop_domain: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """Receive a webhook registered at /webhooks/<resource>/<event>."""
    payload = await _read_payload(request)
    return _respond(db, f"{resource}/{event}", x_shopify_shop_domain, payload)
