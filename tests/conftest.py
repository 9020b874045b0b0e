"""
Shared fixtures: settings, HTML templates and a demo service router.
"""

from typing import Any, Optional

import pytest
from fastapi import APIRouter, Depends, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel

from servicekit.core.config import Settings
from servicekit.domain.negotiation.entities import Detail
from servicekit.domain.negotiation.errors import ServiceError
from servicekit.interfaces.http.body import read_body
from servicekit.interfaces.http.responses import Responder, get_responder
from servicekit.main import create_app

PAGE_TEMPLATE = (
    "<!DOCTYPE html><html><body><h1>{{ data.name }}</h1>"
    "{% if field_exists('note', data) %}<p>{{ data.note }}</p>{% endif %}"
    "</body></html>"
)
FRAGMENT_TEMPLATE = "<div class=\"item\">{{ data.name }}</div>"


class Item(BaseModel):
    id: int
    name: str
    note: Optional[str] = None


def build_demo_router() -> APIRouter:
    router = APIRouter()

    @router.get("/items/{item_id}")
    def get_item(
        item_id: int,
        request: Request,
        responder: Responder = Depends(get_responder),
    ):
        if item_id == 0:
            raise ServiceError(400, ValueError("bad id"), "#see-docs", Detail("extra context"))
        return responder.respond_ok(request, Item(id=item_id, name="<b>widget</b>", note="n"))

    @router.post("/echo")
    def echo(
        request: Request,
        body: Any = Depends(read_body),
        responder: Responder = Depends(get_responder),
    ):
        return responder.respond(request, 201, {"received": body})

    @router.get("/empty")
    def empty(request: Request, responder: Responder = Depends(get_responder)):
        return responder.respond_ok(request, None)

    @router.get("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    return router


@pytest.fixture
def demo_router() -> APIRouter:
    return build_demo_router()


@pytest.fixture
def template_files(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(PAGE_TEMPLATE)
    fragment = tmp_path / "fragment.html"
    fragment.write_text(FRAGMENT_TEMPLATE)
    return str(page), str(fragment)


@pytest.fixture
def make_settings():
    def _make(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def client(make_settings, template_files) -> TestClient:
    page, fragment = template_files
    config = make_settings(html_page_template=page, html_fragment_template=fragment)
    app = create_app(config, routers=[build_demo_router()])
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def plain_client(make_settings) -> TestClient:
    """Client for an app without HTML templates."""
    app = create_app(make_settings(), routers=[build_demo_router()])
    return TestClient(app, raise_server_exceptions=False)
