"""Health checks behind GET /health."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY


def check_database_health(db: Session) -> ComponentHealth:
    """Round-trip a SELECT 1; any database error marks the component unhealthy."""
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(HealthStatus.UNHEALTHY, "Database error")
    return ComponentHealth(
        HealthStatus.HEALTHY,
        "Database connection OK",
        round((time.perf_counter() - started) * 1000, 2),
    )


def check_shopify_configuration() -> ComponentHealth:
    """Report the Admin API version in use; no call is made to Shopify."""
    if not settings.SHOPIFY_API_VERSION:
        return ComponentHealth(HealthStatus.UNHEALTHY, "SHOPIFY_API_VERSION is not set")
    mode = "single-store token" if settings.SHOPIFY_ACCESS_TOKEN else "per-shop tokens"
    return ComponentHealth(HealthStatus.HEALTHY, f"Admin API {settings.SHOPIFY_API_VERSION}, {mode}")


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    if all(component.healthy for component in components.values()):
        return HealthStatus.HEALTHY
    return HealthStatus.UNHEALTHY
