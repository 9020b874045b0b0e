"""
Request body decoding.

Uses the same negotiation table as responses, applied to
``Content-Type`` with plain text and HTML disabled, so unknown types are
read as JSON.
"""

import json
import logging
from typing import Any, Optional

import cbor2
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, fromstring
from fastapi import Depends, Request

from servicekit.domain.negotiation.entities import Detail, Message, ResponseFormat
from servicekit.domain.negotiation.errors import ServiceError
from servicekit.domain.negotiation.negotiator import negotiate_content_type
from servicekit.interfaces.http.responses import Responder, get_responder

logger = logging.getLogger(__name__)

HTTP_400 = 400


def xml_to_plain(element: Any) -> Any:
    """Convert an XML element into builtins.

    Leaf elements become their text (``None`` when empty). Children become
    mapping entries; repeated child names collect into a list.
    """
    children = list(element)
    if not children:
        return element.text
    result: dict[str, Any] = {}
    for child in children:
        value = xml_to_plain(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                existing = result[child.tag] = [existing]
            existing.append(value)
        else:
            result[child.tag] = value
    return result


def decode_body(raw: bytes, fmt: ResponseFormat) -> Optional[Any]:
    """Decode ``raw`` according to the negotiated body format.

    Raises:
        ServiceError: 400 if the body does not parse.
    """
    if not raw:
        return None
    try:
        if fmt is ResponseFormat.BINARY_MAP:
            return cbor2.loads(raw)
        if fmt is ResponseFormat.XML:
            return xml_to_plain(fromstring(raw))
        return json.loads(raw)
    except (cbor2.CBORDecodeError, ParseError, DefusedXmlException, ValueError) as exc:
        logger.warning("Malformed %s request body: %s", fmt.media_type, exc)
        raise ServiceError(
            HTTP_400, Message("Malformed request body"), Detail(str(exc))
        ) from exc


async def read_body(
    request: Request, responder: Responder = Depends(get_responder)
) -> Optional[Any]:
    """FastAPI dependency returning the decoded request body."""
    fmt = negotiate_content_type(request.headers, responder.templates)
    return decode_body(await request.body(), fmt)
