"""
Prometheus metrics middleware for HTTP request tracking.

Tracks request duration, status codes and in-progress requests through
`prometheus_metrics`.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip the scrape endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        raw_path = request.url.path
        # Normalize endpoint label to reduce cardinality (strip numeric IDs)
        path = "/".join(":id" if segment.isdigit() else segment for segment in raw_path.split("/"))

        prometheus_metrics.track_http_request_start(method, path)
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            prometheus_metrics.record_http_request(
                method=method, endpoint=path, duration=duration, status_code=response.status_code
            )

            return response

        finally:
            prometheus_metrics.track_http_request_end(method, path)
