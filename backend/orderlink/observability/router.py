"""Monitoring endpoints: Prometheus metrics and health."""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from .. import __version__
from ..database import get_db
from .health import HealthStatus, check_database_health, check_shopify_configuration, get_overall_health

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Counters for custom orders, resolutions, checkouts, webhooks and Admin API calls."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Database connectivity and Shopify configuration",
)
def health_check(db: Session = Depends(get_db)):
    """200 when every component is healthy, 503 otherwise."""
    components = {
        "database": check_database_health(db),
        "shopify": check_shopify_configuration(),
    }
    overall = get_overall_health(components)

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall == HealthStatus.HEALTHY else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": overall.value,
            "version": __version__,
            "components": {
                name: {
                    "status": component.status.value,
                    "message": component.message,
                    "latency_ms": component.latency_ms,
                }
                for name, component in components.items()
            },
        },
    )
