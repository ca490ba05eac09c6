"""
SongCatalog Backend: Request Logging Middleware
================================================

What:  One log line per HTTP request, with status and duration.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client address.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Log levels:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from songcatalog.middleware.request_id import request_id_var

logger = logging.getLogger("songcatalog.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome. /health checks are not logged."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        query = f"?{request.url.query}" if request.url.query else ""
        logger.log(
            log_level,
            "%s %s%s %d %.1fms [%s] from %s",
            method,
            path,
            query,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
