"""
Middleware to log HTTP requests with structured fields.
Fields are shipped to Datadog by the DatadogLogger handler.
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("workforce_risk.http")

SKIPPED_PATHS = {"/health", "/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs request start, completion and unhandled errors for every
    non-health request.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        request_id = request.headers.get("X-Request-ID", "")

        # Skip health checks (too noisy)
        if path in SKIPPED_PATHS:
            return await call_next(request)

        logger.info(
            f"{method} {path}",
            extra={
                "http.method": method,
                "http.url": path,
                "http.client_ip": client_ip,
                "http.request_id": request_id,
                "event_type": "http_request_start",
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"{method} {path} 500 - {str(e)}",
                extra={
                    "http.method": method,
                    "http.url": path,
                    "http.status_code": 500,
                    "http.client_ip": client_ip,
                    "http.request_id": request_id,
                    "duration_ms": round(duration_ms, 2),
                    "event_type": "http_request_error",
                },
                exc_info=True
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{method} {path} {response.status_code}",
            extra={
                "http.method": method,
                "http.url": path,
                "http.status_code": response.status_code,
                "http.client_ip": client_ip,
                "http.request_id": request_id,
                "duration_ms": round(duration_ms, 2),
                "event_type": "http_request_complete",
            }
        )
        return response
