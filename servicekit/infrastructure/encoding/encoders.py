"""
Wire encoders for the non-HTML response formats.

Every encoder is lazy: ``encode`` returns a generator, so nothing is
serialized until the caller has committed the status line and starts
pulling chunks. Failures surface as EncodingError while iterating.
"""

import dataclasses
import json
import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import cbor2
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from servicekit.domain.negotiation.entities import ErrorResponse, ResponseFormat
from servicekit.domain.negotiation.errors import EncodingError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
XML_ROOT_DEFAULT = "response"
XML_LIST_ITEM = "item"

_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")
# Anything outside the XML 1.0 Char production.
_XML_ILLEGAL_CHAR = re.compile(
    "[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


def to_plain(payload: Any) -> Any:
    """Normalize a payload into JSON-compatible builtins.

    Raises:
        EncodingError: If the payload holds values with no plain form.
    """
    if isinstance(payload, ErrorResponse):
        return payload.as_dict()
    try:
        return jsonable_encoder(payload)
    except (TypeError, ValueError) as exc:
        raise EncodingError("application/json", str(exc)) from exc


def _buffered(pieces: Iterable[str], size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Coalesce many small text pieces into chunks of roughly ``size`` bytes."""
    buffer: list[bytes] = []
    pending = 0
    for piece in pieces:
        data = piece.encode("utf-8")
        buffer.append(data)
        pending += len(data)
        if pending >= size:
            yield b"".join(buffer)
            buffer.clear()
            pending = 0
    if buffer:
        yield b"".join(buffer)


class Encoder(ABC):
    """Encodes one payload into the body of a response."""

    format: ResponseFormat

    @property
    def media_type(self) -> str:
        return self.format.media_type

    @abstractmethod
    def encode(self, payload: Any) -> Iterator[bytes]:
        """Yield the encoded body of a success response."""

    def encode_error(self, error: ErrorResponse) -> Iterator[bytes]:
        """Yield the encoded body of an error response."""
        return self.encode(error)


class PlainTextEncoder(Encoder):
    """Default string conversion. ``None`` produces an empty body."""

    format = ResponseFormat.PLAIN_TEXT

    def encode(self, payload: Any) -> Iterator[bytes]:
        if payload is None:
            return
        yield str(payload).encode("utf-8")

    def encode_error(self, error: ErrorResponse) -> Iterator[bytes]:
        yield error.message.encode("utf-8")


class JsonEncoder(Encoder):
    """Canonical JSON: sorted keys, compact separators."""

    format = ResponseFormat.JSON

    def __init__(self) -> None:
        self._encoder = json.JSONEncoder(
            sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )

    def encode(self, payload: Any) -> Iterator[bytes]:
        plain = to_plain(payload)
        try:
            yield from _buffered(self._encoder.iterencode(plain))
        except (TypeError, ValueError) as exc:
            raise EncodingError(self.media_type, str(exc)) from exc


class CborEncoder(Encoder):
    """Binary map encoding with the same structure as the JSON form."""

    format = ResponseFormat.BINARY_MAP

    def encode(self, payload: Any) -> Iterator[bytes]:
        plain = to_plain(payload)
        try:
            data = cbor2.dumps(plain, canonical=True)
        except (cbor2.CBOREncodeError, TypeError, ValueError) as exc:
            raise EncodingError(self.media_type, str(exc)) from exc
        yield data


class XmlEncoder(Encoder):
    """Structural XML rendition of the JSON form.

    The root element is named after the payload type for models and
    dataclasses, ``response`` otherwise. Mapping keys become child
    elements and sequences repeat their enclosing element.
    """

    format = ResponseFormat.XML

    def encode(self, payload: Any) -> Iterator[bytes]:
        root_name = xml_root_name(payload)
        plain = to_plain(payload)
        root = ET.Element(root_name)
        if isinstance(plain, list):
            for item in plain:
                self._append(root, XML_LIST_ITEM, item)
        else:
            self._fill(root, plain)
        yield ET.tostring(root, encoding="unicode").encode("utf-8")

    def _append(self, parent: ET.Element, name: str, value: Any) -> None:
        if not _XML_NAME.match(name):
            raise EncodingError(self.media_type, f"invalid element name {name!r}")
        if isinstance(value, list):
            for item in value:
                self._append(parent, name, item)
            return
        child = ET.SubElement(parent, name)
        self._fill(child, value)

    def _fill(self, element: ET.Element, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            for key, item in value.items():
                self._append(element, str(key), item)
        elif isinstance(value, list):
            for item in value:
                self._append(element, XML_LIST_ITEM, item)
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        else:
            text = str(value)
            match = _XML_ILLEGAL_CHAR.search(text)
            if match:
                raise EncodingError(
                    self.media_type,
                    f"character {match.group()!r} is not allowed in XML text",
                )
            element.text = text


def xml_root_name(payload: Any) -> str:
    """Root element name for a payload."""
    if isinstance(payload, BaseModel) or (
        dataclasses.is_dataclass(payload) and not isinstance(payload, type)
    ):
        return type(payload).__name__
    return XML_ROOT_DEFAULT
