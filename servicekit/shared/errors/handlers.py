"""
Centralized error handlers for FastAPI.

Maps exceptions to negotiated error responses.
No stack traces or internal details are exposed to clients.
Every error response goes through Responder.respond_error so that it uses
the same wire format a success response would have used.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from servicekit.domain.negotiation.entities import Detail, Message
from servicekit.domain.negotiation.error_assembler import status_text
from servicekit.domain.negotiation.errors import ServiceError
from servicekit.interfaces.http.responses import get_responder

logger = logging.getLogger(__name__)

HTTP_422 = 422
HTTP_500 = 500


def _location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> Response:
        """Render errors raised deliberately by route handlers."""
        logger.warning("Service error %d on %s", exc.status_code, request.url.path)
        return get_responder(request).respond_error(request, exc.status_code, *exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        """Render framework HTTP errors (404, 405, ...)."""
        details = []
        if exc.detail and exc.detail != status_text(exc.status_code):
            details.append(Message(str(exc.detail)))
        return get_responder(request).respond_error(
            request, exc.status_code, *details, headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> Response:
        """Render request validation failures, one detail per problem."""
        logger.warning("Invalid request on %s", request.url.path)
        details = [
            Detail(f"{_location(error.get('loc', ()))}: {error.get('msg', '')}")
            for error in exc.errors()
        ]
        return get_responder(request).respond_error(
            request, HTTP_422, Message("Invalid request parameters"), *details
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> Response:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return get_responder(request).respond_error(request, HTTP_500)
