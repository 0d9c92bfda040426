"""
Request tracing middleware
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from event_booking.core.logging_config import set_trace_id, generate_trace_id
from event_booking.core.metrics import http_requests_total, http_request_duration_seconds

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-ID"


class TracingMiddleware(BaseHTTPMiddleware):
    """Middleware to add trace ID and timing to all requests"""

    async def dispatch(self, request: Request, call_next):
        # Generate or extract trace ID
        trace_id = request.headers.get(TRACE_HEADER) or generate_trace_id()
        set_trace_id(trace_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={"duration_ms": round(duration_ms, 2), "error": str(e)},
                exc_info=True,
            )
            http_requests_total.labels(request.method, request.url.path, 500).inc()
            raise

        duration = time.perf_counter() - start_time
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "duration_ms": round(duration * 1000, 2),
                "status_code": response.status_code,
            },
        )
        http_requests_total.labels(request.method, endpoint, response.status_code).inc()
        http_request_duration_seconds.labels(request.method, endpoint).observe(duration)

        response.headers[TRACE_HEADER] = trace_id
        return response
