"""
Access log middleware.

Logs one line per request with timing, status and a redacted token.
The health endpoint is polled constantly by load balancers, so it is
skipped unless explicitly enabled.
"""

import logging
import time
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from servicekit.interfaces.health import HEALTH_PATH
from servicekit.shared.logging import redact_token

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Middleware that logs every HTTP request.

    Args:
        app: The wrapped ASGI application.
        log_health: Also log calls to the health endpoint.
    """

    def __init__(self, app: ASGIApp, log_health: bool = False) -> None:
        super().__init__(app)
        self.log_health = log_health

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and log its outcome."""
        started = time.perf_counter()
        response = await call_next(request)

        if request.url.path == HEALTH_PATH and not self.log_health:
            return response

        authorization = request.headers.get("authorization", "")
        token = f" token:{redact_token(authorization)}" if authorization else ""
        latency_ms = (time.perf_counter() - started) * 1000.0
        client = request.client.host if request.client else "-"
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        logger.info(
            "HTTP Request :- time:%s ip:%s latency:%.2fms method:%s path:%s status:%d%s",
            datetime.now(tz=timezone.utc).isoformat(timespec="seconds"),
            client,
            latency_ms,
            request.method,
            target,
            response.status_code,
            token,
        )
        return response
