"""
Domain entities for the negotiation context.

Response formats, the immutable HTML template configuration and the
structured error payload. No framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ResponseFormat(Enum):
    """Closed set of wire formats a response may take."""

    PLAIN_TEXT = "plain-text"
    HTML_PAGE = "html-page"
    HTML_FRAGMENT = "html-fragment"
    BINARY_MAP = "binary-map"
    JSON = "json"
    XML = "xml"

    @property
    def media_type(self) -> str:
        """The exact ``Content-Type`` value sent for this format."""
        return _MEDIA_TYPES[self]

    @property
    def is_html(self) -> bool:
        return self in (ResponseFormat.HTML_PAGE, ResponseFormat.HTML_FRAGMENT)


_MEDIA_TYPES = {
    ResponseFormat.PLAIN_TEXT: "text/plain",
    ResponseFormat.HTML_PAGE: "text/html",
    ResponseFormat.HTML_FRAGMENT: "application/html",
    ResponseFormat.BINARY_MAP: "application/cbor",
    ResponseFormat.JSON: "application/json",
    ResponseFormat.XML: "application/xml",
}


@dataclass(frozen=True)
class TemplatePaths:
    """Template files for the two HTML formats.

    A slot left as ``None`` means the matching format is never negotiated.
    Built once at startup and shared read-only afterwards.
    """

    html_page: Optional[str] = None
    html_fragment: Optional[str] = None

    def path_for(self, fmt: ResponseFormat) -> Optional[str]:
        if fmt is ResponseFormat.HTML_PAGE:
            return self.html_page
        if fmt is ResponseFormat.HTML_FRAGMENT:
            return self.html_fragment
        return None


@dataclass(frozen=True)
class ErrorCause:
    """An exception whose text becomes the error message."""

    error: BaseException


@dataclass(frozen=True)
class Message:
    """Replaces the error message."""

    text: str


@dataclass(frozen=True)
class Documentation:
    """Reference link or identifier pointing at further documentation."""

    ref: str


@dataclass(frozen=True)
class Detail:
    """One extra line appended to the error details."""

    text: str


ErrorDetail = Union[ErrorCause, Message, Documentation, Detail]


@dataclass
class ErrorResponse:
    """Standard fields returned to clients for every failed request.

    Attributes:
        status_code: HTTP status of the response.
        message: Human-readable summary. Never empty once assembled.
        documentation: Optional reference for further reading.
        details: Extra context lines, in the order they were supplied.
    """

    status_code: int
    message: str
    documentation: str = ""
    details: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        """Return the wire shape, omitting ``details`` when empty."""
        body: dict = {
            "status_code": self.status_code,
            "message": self.message,
            "documentation": self.documentation,
        }
        if self.details:
            body["details"] = list(self.details)
        return body
