"""
Shared-token authorization middleware.

Every request except the health endpoint and CORS preflights must carry
an ``Authorization`` header equal to the configured service key.
Rejections use the negotiated error format.
"""

import hmac
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from servicekit.interfaces.health import HEALTH_PATH
from servicekit.interfaces.http.responses import get_responder

logger = logging.getLogger(__name__)

HTTP_401 = 401
HTTP_403 = 403
NOT_AUTHORIZED = "Not authorized"


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Middleware that enforces the service key.

    A missing token is answered with 403, a wrong token with 401.

    Args:
        app: The wrapped ASGI application.
        service_key: The token every caller must present.
    """

    def __init__(self, app: ASGIApp, service_key: str) -> None:
        super().__init__(app)
        self._service_key = service_key

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" or request.url.path == HEALTH_PATH:
            return await call_next(request)

        token = request.headers.get("authorization", "")
        if not token:
            logger.error("No authorisation token presented on: %s", request.url.path)
            return get_responder(request).respond_error(request, HTTP_403, NOT_AUTHORIZED)

        if not hmac.compare_digest(token.encode(), self._service_key.encode()):
            logger.error("Authorisation token presented but not valid")
            return get_responder(request).respond_error(request, HTTP_401, NOT_AUTHORIZED)

        return await call_next(request)
