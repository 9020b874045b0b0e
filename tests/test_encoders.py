"""
Tests for the wire encoders.

Encoders are lazy generators; failures only appear while iterating.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date
from typing import Optional

import cbor2
import pytest
from pydantic import BaseModel

from servicekit.domain.negotiation.entities import ResponseFormat, TemplatePaths
from servicekit.domain.negotiation.error_assembler import build_error_response
from servicekit.domain.negotiation.errors import EncodingError
from servicekit.infrastructure.encoding import (
    CborEncoder,
    HtmlTemplateEncoder,
    JsonEncoder,
    PlainTextEncoder,
    XmlEncoder,
    encoder_for,
    field_exists,
)


class Order(BaseModel):
    id: int
    placed: date
    tags: list[str]
    note: Optional[str] = None


@dataclass
class Point:
    x: int
    y: int


def _body(chunks) -> bytes:
    return b"".join(chunks)


class TestPlainText:
    def test_default_string_conversion(self) -> None:
        assert _body(PlainTextEncoder().encode(42)) == b"42"

    def test_none_writes_nothing(self) -> None:
        assert _body(PlainTextEncoder().encode(None)) == b""

    def test_error_writes_message_only(self) -> None:
        error = build_error_response(404, "missing")
        assert _body(PlainTextEncoder().encode_error(error)) == b"missing"


class TestJson:
    def test_canonical_key_order(self) -> None:
        payload = {"b": 1, "a": {"d": 2, "c": 3}}
        assert _body(JsonEncoder().encode(payload)) == b'{"a":{"c":3,"d":2},"b":1}'

    def test_models_are_normalized(self) -> None:
        order = Order(id=7, placed=date(2024, 1, 2), tags=["x"])
        body = json.loads(_body(JsonEncoder().encode(order)))
        assert body == {"id": 7, "placed": "2024-01-02", "tags": ["x"], "note": None}

    def test_large_payload_is_streamed_in_chunks(self) -> None:
        payload = {"rows": [{"value": "x" * 100, "n": i} for i in range(2000)]}
        chunks = list(JsonEncoder().encode(payload))
        assert len(chunks) > 1
        assert json.loads(b"".join(chunks)) == payload

    def test_unserializable_payload_fails_lazily(self) -> None:
        chunks = JsonEncoder().encode(object())
        with pytest.raises(EncodingError):
            list(chunks)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_fail(self, value: float) -> None:
        """NaN and infinities have no JSON form and must not be written."""
        with pytest.raises(EncodingError):
            list(JsonEncoder().encode({"v": value}))

    def test_error_omits_empty_details(self) -> None:
        body = json.loads(_body(JsonEncoder().encode_error(build_error_response(404))))
        assert body == {"status_code": 404, "message": "Not Found", "documentation": ""}


class TestCbor:
    def test_same_structure_as_json(self) -> None:
        order = Order(id=1, placed=date(2024, 5, 6), tags=["a", "b"], note="n")
        decoded = cbor2.loads(_body(CborEncoder().encode(order)))
        assert decoded == json.loads(_body(JsonEncoder().encode(order)))

    def test_error_payload(self) -> None:
        error = build_error_response(400, "bad", "#docs")
        decoded = cbor2.loads(_body(CborEncoder().encode_error(error)))
        assert decoded == {"status_code": 400, "message": "bad", "documentation": "docs"}


class TestXml:
    def test_dataclass_root_is_type_name(self) -> None:
        root = ET.fromstring(_body(XmlEncoder().encode(Point(x=1, y=2))))
        assert root.tag == "Point"
        assert root.findtext("x") == "1"
        assert root.findtext("y") == "2"

    def test_mapping_root_and_repeated_lists(self) -> None:
        root = ET.fromstring(_body(XmlEncoder().encode({"tag": ["a", "b"], "ok": True})))
        assert root.tag == "response"
        assert [el.text for el in root.findall("tag")] == ["a", "b"]
        assert root.findtext("ok") == "true"

    def test_top_level_list_uses_items(self) -> None:
        root = ET.fromstring(_body(XmlEncoder().encode([1, 2])))
        assert [el.text for el in root.findall("item")] == ["1", "2"]

    def test_error_payload(self) -> None:
        error = build_error_response(400, "bad id", "#see-docs")
        error.details.append("extra context")
        root = ET.fromstring(_body(XmlEncoder().encode_error(error)))
        assert root.tag == "ErrorResponse"
        assert root.findtext("status_code") == "400"
        assert root.findtext("message") == "bad id"
        assert root.findtext("documentation") == "see-docs"
        assert root.findtext("details") == "extra context"

    def test_invalid_element_name_fails(self) -> None:
        with pytest.raises(EncodingError):
            list(XmlEncoder().encode({"not a name": 1}))

    @pytest.mark.parametrize("text", ["a\x00b", "bell\x07", "esc\x1b[0m", "\ufffe"])
    def test_characters_outside_xml_fail(self, text: str) -> None:
        with pytest.raises(EncodingError):
            list(XmlEncoder().encode({"v": text}))

    def test_tabs_newlines_and_astral_text_survive(self) -> None:
        text = "a\tb\nc \U0001F600"
        root = ET.fromstring(_body(XmlEncoder().encode({"v": text})))
        assert root.findtext("v") == text


class TestHtml:
    def test_renders_raw_html(self, template_files) -> None:
        page, _ = template_files
        encoder = HtmlTemplateEncoder(ResponseFormat.HTML_PAGE, page)
        body = _body(encoder.encode({"name": "<b>bold</b>"})).decode()
        assert "<h1><b>bold</b></h1>" in body
        assert "<p>" not in body

    def test_optional_field_rendered_when_present(self, template_files) -> None:
        page, _ = template_files
        encoder = HtmlTemplateEncoder(ResponseFormat.HTML_PAGE, page)
        body = _body(encoder.encode({"name": "x", "note": "hello"})).decode()
        assert "<p>hello</p>" in body

    def test_missing_template_fails_lazily(self, tmp_path) -> None:
        encoder = HtmlTemplateEncoder(ResponseFormat.HTML_PAGE, str(tmp_path / "nope.html"))
        chunks = encoder.encode({"name": "x"})
        with pytest.raises(EncodingError):
            list(chunks)

    def test_broken_template_fails(self, tmp_path) -> None:
        broken = tmp_path / "broken.html"
        broken.write_text("{% if %}")
        encoder = HtmlTemplateEncoder(ResponseFormat.HTML_FRAGMENT, str(broken))
        with pytest.raises(EncodingError):
            list(encoder.encode({}))

    def test_error_page_and_fragment(self, template_files) -> None:
        page, fragment = template_files
        error = build_error_response(500, "line one\r\nline two")
        page_body = _body(
            HtmlTemplateEncoder(ResponseFormat.HTML_PAGE, page).encode_error(error)
        ).decode()
        fragment_body = _body(
            HtmlTemplateEncoder(ResponseFormat.HTML_FRAGMENT, fragment).encode_error(error)
        ).decode()
        assert page_body.startswith("<!DOCTYPE html>")
        assert '<td id="errormessage">line one<br/>line two</td>' in page_body
        assert fragment_body.startswith("<table>")
        assert '<td id="errorcode">500</td>' in fragment_body

    def test_rejects_non_html_format(self) -> None:
        with pytest.raises(ValueError):
            HtmlTemplateEncoder(ResponseFormat.JSON, "x.html")


class TestFieldExists:
    def test_model_fields(self) -> None:
        order = Order(id=1, placed=date(2024, 1, 1), tags=[])
        assert field_exists("note", order)
        assert not field_exists("missing", order)

    def test_dataclass_and_mapping(self) -> None:
        assert field_exists("x", Point(1, 2))
        assert field_exists("k", {"k": None})
        assert not field_exists("k", {})

    def test_other_values(self) -> None:
        assert not field_exists("real", 3)
        assert not field_exists("x", Point)


class TestEncoderFor:
    def test_selects_by_format(self) -> None:
        templates = TemplatePaths()
        assert isinstance(encoder_for(ResponseFormat.JSON, templates), JsonEncoder)
        assert isinstance(encoder_for(ResponseFormat.XML, templates), XmlEncoder)
        assert isinstance(encoder_for(ResponseFormat.BINARY_MAP, templates), CborEncoder)
        assert isinstance(encoder_for(ResponseFormat.PLAIN_TEXT, templates), PlainTextEncoder)

    def test_html_uses_slot_path(self) -> None:
        templates = TemplatePaths(html_page="p.html", html_fragment="f.html")
        encoder = encoder_for(ResponseFormat.HTML_FRAGMENT, templates)
        assert isinstance(encoder, HtmlTemplateEncoder)
        assert encoder.template_path == "f.html"
        assert encoder.media_type == "application/html"

    def test_html_without_template_is_an_error(self) -> None:
        with pytest.raises(ValueError):
            encoder_for(ResponseFormat.HTML_PAGE, TemplatePaths())
