"""
CORS preflight middleware.

Browsers send an OPTIONS request before cross-origin calls and give up
unless it succeeds, so OPTIONS is answered here for every path without
reaching authorization or route handlers.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE",
    "Access-Control-Allow-Headers": (
        "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization"
    ),
}


class PreflightMiddleware(BaseHTTPMiddleware):
    """Middleware that short-circuits OPTIONS requests."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return JSONResponse({"status": "ok"}, headers=CORS_HEADERS)
        return await call_next(request)
