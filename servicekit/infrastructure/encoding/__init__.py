"""
Response encoders, one per negotiated format.

Use ``encoder_for`` to pick the encoder for a request; the template
configuration decides which file backs the HTML formats.
"""

from servicekit.domain.negotiation.entities import ResponseFormat, TemplatePaths
from servicekit.infrastructure.encoding.encoders import (
    CborEncoder,
    Encoder,
    JsonEncoder,
    PlainTextEncoder,
    XmlEncoder,
    to_plain,
)
from servicekit.infrastructure.encoding.html import (
    HtmlTemplateEncoder,
    field_exists,
    load_template,
)

_STATELESS = {
    ResponseFormat.PLAIN_TEXT: PlainTextEncoder(),
    ResponseFormat.JSON: JsonEncoder(),
    ResponseFormat.BINARY_MAP: CborEncoder(),
    ResponseFormat.XML: XmlEncoder(),
}


def encoder_for(fmt: ResponseFormat, templates: TemplatePaths) -> Encoder:
    """Return the encoder for a negotiated format.

    HTML formats are only negotiated when their template is configured,
    so a missing path here is a programming error.
    """
    if fmt.is_html:
        path = templates.path_for(fmt)
        if not path:
            raise ValueError(f"No template configured for {fmt.value}")
        return HtmlTemplateEncoder(fmt, path)
    return _STATELESS[fmt]


__all__ = [
    "CborEncoder",
    "Encoder",
    "HtmlTemplateEncoder",
    "JsonEncoder",
    "PlainTextEncoder",
    "XmlEncoder",
    "encoder_for",
    "field_exists",
    "load_template",
    "to_plain",
]
