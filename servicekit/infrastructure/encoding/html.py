"""
HTML encoders.

Success responses are rendered through the template file configured for
the negotiated slot. Error responses use built-in templates so that a
broken application template can never hide an error.

Templates are rendered WITHOUT autoescaping: payload HTML is assumed to be
pre-sanitized or intentionally raw.
"""

import dataclasses
import logging
import os
from collections.abc import Iterator, Mapping
from functools import lru_cache
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, TemplateError
from pydantic import BaseModel

from servicekit.domain.negotiation.entities import ErrorResponse, ResponseFormat
from servicekit.domain.negotiation.errors import EncodingError
from servicekit.infrastructure.encoding.encoders import Encoder

logger = logging.getLogger(__name__)

ERROR_TEMPLATE_FRAGMENT = """<table>
<tr><td>StatusCode:</td><td id="errorcode">{{ status_code }}</td></tr>
<tr><td>Message:</td><td id="errormessage">{{ message }}</td></tr>
<tr><td>Documentation:</td><td id="errordocumentation">{{ documentation }}</td></tr>
</table>"""

ERROR_TEMPLATE_PAGE = (
    """<!DOCTYPE html>
<html lang="en">
<head>
<title>An error occurred</title>
<style>
table, tr, td {
	border: 1px solid black;
	border-collapse: collapse;
}
#errormessage {
	font-weight: bold;
}
</style>
</head>
<body>"""
    + ERROR_TEMPLATE_FRAGMENT
    + """
</body>
</html>
"""
)


def field_exists(name: str, data: Any) -> bool:
    """Report whether ``data`` has a field called ``name``.

    Works for pydantic models, dataclass instances and mappings. Used by
    templates to render optional fields.
    """
    if isinstance(data, Mapping):
        return name in data
    if isinstance(data, BaseModel):
        return name in type(data).model_fields
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return name in {f.name for f in dataclasses.fields(data)}
    return False


def prepare_string_as_html(value: str) -> str:
    return value.strip().replace("\n", "<br/>").replace("\r", "")


@lru_cache(maxsize=16)
def _environment(directory: str) -> Environment:
    env = Environment(
        loader=FileSystemLoader(directory),
        autoescape=False,
        auto_reload=True,
    )
    env.globals["field_exists"] = field_exists
    return env


def load_template(path: str) -> Template:
    """Load a template file by path.

    Raises:
        jinja2.TemplateError: If the file is missing or cannot be parsed.
    """
    directory, filename = os.path.split(os.path.abspath(path))
    return _environment(directory).get_template(filename)


_error_environment = Environment(autoescape=False)
_error_templates = {
    ResponseFormat.HTML_PAGE: _error_environment.from_string(ERROR_TEMPLATE_PAGE),
    ResponseFormat.HTML_FRAGMENT: _error_environment.from_string(ERROR_TEMPLATE_FRAGMENT),
}


class HtmlTemplateEncoder(Encoder):
    """Renders payloads through a page or fragment template."""

    def __init__(self, fmt: ResponseFormat, template_path: str) -> None:
        if not fmt.is_html:
            raise ValueError(f"{fmt.value} is not an HTML format")
        self.format = fmt
        self.template_path = template_path

    def encode(self, payload: Any) -> Iterator[bytes]:
        try:
            template = load_template(self.template_path)
            body = template.render(data=payload)
        except (TemplateError, OSError) as exc:
            raise EncodingError(
                self.media_type, f"template {self.template_path}: {exc}"
            ) from exc
        yield body.encode("utf-8")

    def encode_error(self, error: ErrorResponse) -> Iterator[bytes]:
        context = error.as_dict()
        context["message"] = prepare_string_as_html(error.message)
        context["documentation"] = prepare_string_as_html(error.documentation)
        try:
            body = _error_templates[self.format].render(**context)
        except TemplateError as exc:
            raise EncodingError(self.media_type, str(exc)) from exc
        yield body.encode("utf-8")
