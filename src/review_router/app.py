from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from .http import HttpClientFactory
from .router import ReviewRouter
from .settings import RouterSettings, settings as default_settings

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: RouterSettings | None = None, client: httpx.AsyncClient | None = None) -> FastAPI:
    settings = settings or default_settings
    owns_client = client is None
    shared = client or HttpClientFactory.client(timeout=settings.upstream_timeout)
    router = ReviewRouter(shared, settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            if owns_client:
                await shared.aclose()

    # Every path belongs to the proxied site, so no docs/openapi routes.
    app = FastAPI(
        title="Review Router",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.router = router

    @app.api_route("/{full_path:path}", methods=METHODS, include_in_schema=False)
    async def route(request: Request, full_path: str):
        return await router.handle(request)

    return app
