"""
Wire format negotiation.

One rule table serves both the ``Accept`` header (response format) and the
``Content-Type`` header (request body format). HTML is only offered when its
template exists, and FHIR media types are aliases of their plain
counterparts. Negotiation is total: anything unrecognised becomes JSON.
"""

from collections.abc import Mapping

from servicekit.domain.negotiation.entities import ResponseFormat, TemplatePaths

_ALWAYS = {
    "application/cbor": ResponseFormat.BINARY_MAP,
    "": ResponseFormat.JSON,
    "application/json": ResponseFormat.JSON,
    "application/fhir+json": ResponseFormat.JSON,
    "application/xml": ResponseFormat.XML,
    "application/fhir+xml": ResponseFormat.XML,
}


def negotiate(
    header_value: str,
    is_response: bool,
    templates: TemplatePaths = TemplatePaths(),
) -> ResponseFormat:
    """Map a raw header value onto a wire format.

    Args:
        header_value: The header exactly as received (no q-value parsing).
        is_response: True when negotiating the response format. Plain text
            and HTML are only valid for responses.
        templates: Configured HTML templates; an unset slot disables the
            matching HTML format.

    Returns:
        The negotiated format. Never raises.
    """
    if is_response:
        if header_value == "text/plain":
            return ResponseFormat.PLAIN_TEXT
        if header_value == "text/html" and templates.html_page:
            return ResponseFormat.HTML_PAGE
        if header_value == "application/html" and templates.html_fragment:
            return ResponseFormat.HTML_FRAGMENT
    return _ALWAYS.get(header_value, ResponseFormat.JSON)


def negotiate_accept(
    headers: Mapping[str, str], templates: TemplatePaths = TemplatePaths()
) -> ResponseFormat:
    """Response format for a request, from its ``Accept`` header."""
    return negotiate(headers.get("accept", ""), True, templates)


def negotiate_content_type(
    headers: Mapping[str, str], templates: TemplatePaths = TemplatePaths()
) -> ResponseFormat:
    """Body format of a request, from its ``Content-Type`` header."""
    return negotiate(headers.get("content-type", ""), False, templates)
