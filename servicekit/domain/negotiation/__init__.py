"""
Negotiation context: domain layer.

- Response formats and their media types
- Accept / Content-Type negotiation (with FHIR aliasing)
- Error response assembly from typed details
"""

from servicekit.domain.negotiation.entities import (
    Detail,
    Documentation,
    ErrorCause,
    ErrorResponse,
    Message,
    ResponseFormat,
    TemplatePaths,
)
from servicekit.domain.negotiation.error_assembler import build_error_response
from servicekit.domain.negotiation.errors import (
    EncodingError,
    NegotiationDomainError,
    ResponseAbortedError,
    ServiceError,
)
from servicekit.domain.negotiation.negotiator import (
    negotiate,
    negotiate_accept,
    negotiate_content_type,
)

__all__ = [
    "Detail",
    "Documentation",
    "EncodingError",
    "ErrorCause",
    "ErrorResponse",
    "Message",
    "NegotiationDomainError",
    "ResponseAbortedError",
    "ResponseFormat",
    "ServiceError",
    "TemplatePaths",
    "build_error_response",
    "negotiate",
    "negotiate_accept",
    "negotiate_content_type",
]
