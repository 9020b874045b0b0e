"""
HTTP transport seam.

Provides the Responder (negotiated success/error responses) and the
request body reader used by route handlers.
"""

from servicekit.interfaces.http.body import decode_body, read_body
from servicekit.interfaces.http.responses import (
    NegotiatedResponse,
    Responder,
    get_responder,
)

__all__ = [
    "NegotiatedResponse",
    "Responder",
    "decode_body",
    "get_responder",
    "read_body",
]
