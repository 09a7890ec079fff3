"""Request logging middleware for API observability."""

import logging
import time
from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("msgdispatch.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs client IP, method, path, status and response time."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        # Behind a proxy, the first forwarded address is the original client
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()

        response: Response = await call_next(request)

        process_time_ms = (time.perf_counter() - start_time) * 1000

        # Format: IP METHOD PATH STATUS TIME_MS
        logger.info(
            "%s %s %s %d %.2fms",
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
            process_time_ms,
        )

        response.headers["X-Process-Time-Ms"] = f"{process_time_ms:.2f}"
        return response
