"""OrderLink Backend - Main FastAPI Application

Custom orders for Shopify stores, delivered as shareable customer links.

This module creates and configures the main FastAPI application, including:
- Admin API routers (custom orders, templates, order blocks)
- Public storefront and webhook routers
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import settings
from .errors import OrderLinkError, internal_error_response
from .shopify.client import ShopifyApiError

# Observability
from .observability.logging_config import configure_logging, get_logger
from .observability.middleware import RequestIDMiddleware, StorefrontCORSMiddleware
from .observability.router import router as observability_router

# Domain Routers
from .custom_orders.router import router as custom_orders_router
from .custom_orders.storefront_router import STOREFRONT_PATH_PREFIXES
from .custom_orders.storefront_router import router as storefront_router
from .order_blocks.router import router as order_blocks_router
from .webhooks.router import router as webhooks_router

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = get_logger(__name__)

_DOCS_ENABLED = settings.ENVIRONMENT != "production"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("OrderLink API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Shopify API version: {settings.SHOPIFY_API_VERSION}")

    yield

    logger.info("OrderLink API shutting down...")


app = FastAPI(
    title="OrderLink API",
    description="Custom orders and customer checkout links for Shopify",
    version=__version__,
    debug=settings.DEBUG,
    docs_url="/docs" if _DOCS_ENABLED else None,
    redoc_url="/redoc" if _DOCS_ENABLED else None,
    openapi_url="/openapi.json" if _DOCS_ENABLED else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Added last so it runs first and answers storefront preflights itself
app.add_middleware(StorefrontCORSMiddleware, path_prefixes=STOREFRONT_PATH_PREFIXES)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(OrderLinkError)
async def orderlink_exception_handler(request: Request, exc: OrderLinkError) -> JSONResponse:
    """Render domain errors as {success: false, error}."""
    logger.info(
        f"{exc.status_code} on {request.method} {request.url.path}: {exc.message}",
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(ShopifyApiError)
async def shopify_exception_handler(request: Request, exc: ShopifyApiError) -> JSONResponse:
    """Render Shopify API failures with the errors Shopify returned."""
    logger.warning(
        f"Shopify error on {request.method} {request.url.path}",
        extra={"status_code": exc.status_code}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": str(exc.errors())}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError, which is not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors.

    Logs the full error but returns a generic message.
    """
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions.

    Full details are logged but not exposed to the client.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return internal_error_response()


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics)
app.include_router(observability_router)

# Storefront (public, open CORS)
app.include_router(storefront_router)

# Shopify webhooks
app.include_router(webhooks_router)

# Admin API
app.include_router(custom_orders_router, prefix="/api/v1")
app.include_router(order_blocks_router, prefix="/api/v1")


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "OrderLink API",
        "version": __version__,
        "status": "running",
        "docs": "/docs" if _DOCS_ENABLED else None,
    }


@app.get("/api/v1", include_in_schema=False)
async def api_root() -> dict[str, Any]:
    """API v1 root endpoint."""
    return {
        "version": "v1",
        "status": "active",
        "endpoints": {
            "custom_orders": "/api/v1/custom-orders",
            "templates": "/api/v1/custom-orders/templates",
            "links": "/api/v1/custom-orders/links",
            "order_blocks": "/api/v1/order-blocks",
        }
    }


def create_app() -> FastAPI:
    """Return the configured application (used by tests and ASGI servers)."""
    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "orderlink.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
