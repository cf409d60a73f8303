"""
Request middleware: correlation ids, request logging and the request timeout.
"""

import asyncio
import logging
import time
from uuid import uuid4

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def get_client_ip(request: Request) -> str:
    """Client address, honouring the usual reverse proxy headers"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a correlation id and bounds its duration.

    The inbound X-Correlation-ID header is reused when present. A request
    running past timeout_seconds is cancelled; the unit of work it held never
    commits, so its transaction rolls back.
    """

    def __init__(self, app, timeout_seconds: float, log_requests: bool = True):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.log_requests = log_requests

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        request.state.correlation_id = correlation_id
        started = time.perf_counter()

        try:
            response = await asyncio.wait_for(call_next(request), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                "Request timed out after %ss: %s %s [%s]",
                self.timeout_seconds,
                request.method,
                request.url.path,
                correlation_id,
            )
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": {
                        "code": "REQUEST_TIMEOUT",
                        "message": "Request timed out",
                        "correlation_id": correlation_id,
                    }
                },
            )

        response.headers[CORRELATION_HEADER] = correlation_id
        if self.log_requests:
            logger.info(
                "%s %s -> %d (%.1fms) [%s]",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
                correlation_id,
            )
        return response
