"""
Domain-specific errors for the negotiation context.

Negotiation itself never fails; these errors describe failures to put an
already-committed response on the wire.
No framework imports allowed.
"""


class NegotiationDomainError(Exception):
    """Base error for the response layer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class EncodingError(NegotiationDomainError):
    """Raised when a payload cannot be encoded in the negotiated format."""

    def __init__(self, media_type: str, reason: str) -> None:
        super().__init__(f"Cannot encode {media_type} response: {reason}")
        self.media_type = media_type
        self.reason = reason


class ResponseAbortedError(NegotiationDomainError):
    """Raised after the status line was sent but the body could not be.

    The transport must drop the connection; no further write is attempted.
    """

    def __init__(self, media_type: str, status_code: int, reason: str) -> None:
        super().__init__(
            f"Aborted {status_code} {media_type} response: {reason}"
        )
        self.media_type = media_type
        self.status_code = status_code
        self.reason = reason


class ServiceError(NegotiationDomainError):
    """Raised by request handlers to answer with an error response.

    Args:
        status_code: HTTP status to send.
        *details: Error details applied in order (see build_error_response).
    """

    def __init__(self, status_code: int, *details: object) -> None:
        super().__init__(f"Service error {status_code}")
        self.status_code = status_code
        self.details = details
