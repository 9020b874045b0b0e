"""
Content-negotiated responses.

The Responder negotiates the wire format once per request (cached on the
request state) so that success and error responses always agree. The
NegotiatedResponse commits the status line and ``Content-Type`` first and
only then pulls chunks from the encoder. If encoding or writing fails
after that commit point, the response is aborted and the server drops the
connection: the status line can no longer be changed, and a truncated
body under the wrong status is worse than a broken connection.
"""

import logging
from collections.abc import Iterator
from typing import Any, Optional

from fastapi import Request
from starlette.background import BackgroundTask
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from servicekit.domain.negotiation.entities import ResponseFormat, TemplatePaths
from servicekit.domain.negotiation.error_assembler import build_error_response
from servicekit.domain.negotiation.errors import ResponseAbortedError
from servicekit.domain.negotiation.negotiator import negotiate_accept
from servicekit.infrastructure.encoding import encoder_for

logger = logging.getLogger(__name__)

HTTP_200 = 200


class NegotiatedResponse(Response):
    """Streams encoder output after committing status and content type."""

    def __init__(
        self,
        status_code: int,
        response_format: ResponseFormat,
        chunks: Iterator[bytes],
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.response_format = response_format
        self.media_type = response_format.media_type
        self.background: Optional[BackgroundTask] = None
        self._chunks = chunks
        self.raw_headers = [(b"content-type", self.media_type.encode("latin-1"))]
        for name, value in (headers or {}).items():
            self.raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            }
        )
        # Commit point: status and content type are on the wire.
        try:
            for chunk in self._chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        except Exception as exc:
            logger.error(
                "Encode error: content-type=%s status=%d error=%s",
                self.media_type,
                self.status_code,
                exc,
            )
            raise ResponseAbortedError(self.media_type, self.status_code, str(exc)) from exc

        if self.background is not None:
            await self.background()


class Responder:
    """Builds negotiated success and error responses.

    Args:
        templates: HTML template configuration, fixed for the process.
    """

    def __init__(self, templates: TemplatePaths = TemplatePaths()) -> None:
        self.templates = templates

    def negotiate(self, request: Request) -> ResponseFormat:
        """Response format for ``request``, computed once and reused."""
        fmt = getattr(request.state, "response_format", None)
        if fmt is None:
            fmt = negotiate_accept(request.headers, self.templates)
            request.state.response_format = fmt
        return fmt

    def respond(
        self,
        request: Request,
        status_code: int,
        payload: Any,
        headers: Optional[dict[str, str]] = None,
    ) -> NegotiatedResponse:
        """Return ``payload`` with a custom status in the negotiated format."""
        fmt = self.negotiate(request)
        encoder = encoder_for(fmt, self.templates)
        return NegotiatedResponse(status_code, fmt, encoder.encode(payload), headers)

    def respond_ok(self, request: Request, payload: Any) -> NegotiatedResponse:
        return self.respond(request, HTTP_200, payload)

    def respond_error(
        self,
        request: Request,
        status_code: int,
        *details: Any,
        headers: Optional[dict[str, str]] = None,
    ) -> NegotiatedResponse:
        """Return a structured error in the negotiated format.

        Details are exceptions, strings (``#``-prefixed for documentation)
        or the typed variants from the domain layer.
        """
        fmt = self.negotiate(request)
        error = build_error_response(status_code, *details)
        encoder = encoder_for(fmt, self.templates)
        return NegotiatedResponse(error.status_code, fmt, encoder.encode_error(error), headers)


def get_responder(request: Request) -> Responder:
    """FastAPI dependency returning the application's Responder."""
    responder = getattr(request.app.state, "responder", None)
    if responder is None:
        raise RuntimeError(
            "Responder not initialized. Build the application with create_app()."
        )
    return responder
