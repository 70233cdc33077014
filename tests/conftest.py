"""
Shared pytest fixtures for review router tests.

Provides:
- A fake two-tier origin backed by httpx.MockTransport
- Router settings with a configured org token
- A TestClient wired to the fake origin
"""

from __future__ import annotations

import json as jsonlib
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if SRC_ROOT.is_dir():
    sys.path.insert(0, str(SRC_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from review_router.app import create_app  # noqa: E402
from review_router.http import HttpClientFactory  # noqa: E402
from review_router.settings import RouterSettings  # noqa: E402

REVIEW_HOST = "abc--main--site--org.aem.reviews"
PAGE_ORIGIN = "https://main--site--org.aem.page"
LIVE_ORIGIN = "https://main--site--org.aem.live"
MANIFEST_URL = f"{PAGE_ORIGIN}/.snapshots/abc/.manifest.json"
METADATA_URL = f"{PAGE_ORIGIN}/.snapshots/abc/metadata.json"
ORG_TOKEN = "s3cret"

Route = Callable[[httpx.Request], httpx.Response]


def streamed_response(
    status: int,
    *,
    text: str | None = None,
    json: Any = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build an upstream response whose body is still an unread stream, like a real origin."""
    body = b""
    base: dict[str, str] = {}
    if json is not None:
        body = jsonlib.dumps(json).encode("utf-8")
        base["content-type"] = "application/json"
    elif text is not None:
        body = text.encode("utf-8")
        base["content-type"] = "text/plain; charset=utf-8"
    base["content-length"] = str(len(body))
    base.update(headers or {})
    return httpx.Response(status, headers=base, stream=httpx.ByteStream(body))


class FakeOrigin:
    """Records upstream requests and answers them from a URL table.

    Unknown URLs answer 404. Query strings are ignored for lookup.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        url: str,
        status: int = 200,
        *,
        text: str | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[url] = lambda _request: streamed_response(status, text=text, json=json, headers=headers)

    def add_handler(self, url: str, handler: Route) -> None:
        self.routes[url] = handler

    def manifest(self, paths: list[str], metadata: dict[str, Any] | None = None) -> None:
        payload: dict[str, Any] = {"resources": [{"path": p} for p in paths]}
        if metadata is not None:
            payload["metadata"] = metadata
        self.add(MANIFEST_URL, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url.copy_with(query=None)))
        if route is None:
            return streamed_response(404, text="not found")
        return route(request)

    def requested(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url.copy_with(query=None)) == url]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def origin() -> FakeOrigin:
    return FakeOrigin()


@pytest.fixture
def router_settings() -> RouterSettings:
    return RouterSettings(org_tokens={"org-org-token": ORG_TOKEN})


@pytest.fixture
def client(origin: FakeOrigin, router_settings: RouterSettings) -> TestClient:
    upstream = HttpClientFactory.client(transport=origin.transport())
    return TestClient(create_app(router_settings, client=upstream))


def review_url(path: str) -> str:
    return f"http://{REVIEW_HOST}{path}"
