"""HTTP middleware: request correlation and storefront CORS."""

import time
from typing import Callable, Optional, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..errors import internal_error_response
from .log_context import bind_request, new_request_id
from .logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_shop(request: Request) -> Optional[str]:
    """Shop named by a storefront query or a webhook header, for log context."""
    return request.query_params.get("shop") or request.headers.get("X-Shopify-Shop-Domain")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request ID (reused from X-Request-ID when sent) and log the request.

    The ID is echoed back in the X-Request-ID response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        bind_request(request_id, _request_shop(request))

        started = time.perf_counter()
        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {e}",
                extra={
                    "error_type": type(e).__name__,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
                exc_info=True
            )
            raise

        logger.info(
            f"Request completed: {response.status_code}",
            extra={
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            }
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class StorefrontCORSMiddleware(BaseHTTPMiddleware):
    """Open CORS for the public storefront endpoints.

    The customer order page runs on the shop's own domain, so these paths
    accept any origin. Admin paths are left to CORSMiddleware.
    """

    ALLOW_HEADERS = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }

    def __init__(self, app, path_prefixes: Sequence[str]):
        super().__init__(app)
        self.path_prefixes = tuple(path_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefixes):
            return await call_next(request)

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=self.ALLOW_HEADERS)

        try:
            response = await call_next(request)
        except Exception:
            # ServerErrorMiddleware runs outside this one; answer here so the
            # 500 keeps its CORS headers. RequestIDMiddleware logged the error.
            response = internal_error_response()
        response.headers.update(self.ALLOW_HEADERS)
        return response
