"""Structured request logging middleware for FastAPI."""

import logging
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class StructuredRequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one record per request and tags every log line with a request id.

    The id is taken from the incoming X-Request-ID header when present, bound
    to structlog's context for the duration of the request, and echoed back
    on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Bind request context, run the request and log its outcome."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, request.url.path)
            raise
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

        fields = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        if request.url.query:
            fields["query"] = str(request.url.query)
        if request.client:
            fields["client_host"] = request.client.host

        logger.info(f"{request.method} {request.url.path} {response.status_code}", extra=fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
