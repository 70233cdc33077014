from __future__ import annotations

import logging

import httpx
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from .auth import is_authenticated, unauthorized_response
from .errors import RouterError
from .hostname import resolve_review
from .http import TEXT_PLAIN, content_headers, inbound_headers, response_headers
from .manifest import ManifestClient
from .meta import MetaRewriter, should_rewrite_meta
from .models import ReviewInfo
from .routing import RoutingDecision, classify, is_snapshot_path, snapshot_redirect
from .settings import RouterSettings
from .sitemap import ROBOTS_PATH, SITEMAP_PATHS, SitemapAggregator, robots_response

logger = logging.getLogger(__name__)


def request_path(request: Request) -> str:
    """The percent-encoded request path, as the client sent it."""
    raw = request.scope.get("raw_path")
    if raw:
        return raw.decode("latin-1").split("?", 1)[0]
    return request.url.path


def decorate(response: Response, origin_url: str) -> Response:
    response.headers["x-origin-url"] = origin_url
    response.headers["x-robots-tag"] = "noindex,nofollow"
    return response


def _with_headers(response: Response, headers: list[tuple[str, str]]) -> Response:
    for name, value in headers:
        response.headers.append(name, value)
    return response


class ReviewRouter:
    """Routes one inbound request to the snapshot (page) or live tier.

    Pipeline: snapshot redirect, hostname resolution, manifest, sitemap/robots,
    auth gate, classification, origin fetch, meta rewrite, response decoration.
    """

    def __init__(self, client: httpx.AsyncClient, settings: RouterSettings):
        self._client = client
        self.settings = settings
        self.manifests = ManifestClient(client, settings.aem_domain)
        self.meta = MetaRewriter(client, settings.aem_domain)
        self.sitemaps = SitemapAggregator(client, settings.aem_domain)

    async def handle(self, request: Request) -> Response:
        try:
            return await self._route(request)
        except RouterError as e:
            return Response(e.message, status_code=e.status, media_type=TEXT_PLAIN)
        except Exception as e:
            logger.exception("Error in handle: %s", e)
            return PlainTextResponse(f"Internal Server Error: {e}", status_code=500)

    async def _route(self, request: Request) -> Response:
        pathname = request_path(request)
        if is_snapshot_path(pathname):
            return snapshot_redirect(pathname)

        hostname, review = resolve_review(
            request.url.hostname,
            request.query_params,
            self.settings.reviews_suffixes,
            self.settings.default_hostname,
        )
        inbound = inbound_headers(request.headers.raw)
        token = self.settings.org_token(review.owner)

        manifest_response = await self.manifests.request(review, inbound, token)

        # robots.txt only needs the review to exist.
        if pathname == ROBOTS_PATH:
            return robots_response(hostname)

        manifest = self.manifests.parse(manifest_response)
        if pathname in SITEMAP_PATHS:
            return await self.sitemaps.render(hostname, manifest.page_paths, review, inbound, token)

        authenticated = is_authenticated(manifest, request.headers, token)
        if not authenticated:
            logger.info("Unauthorized request for review %s", review.review_id)
            return unauthorized_response(self.settings.login_script_url)

        page_set = manifest.page_set
        decision = classify(pathname, page_set, review, self.settings.aem_domain)
        rewrite = should_rewrite_meta(page_set, decision.pathname)
        origin_url = decision.url(request.url.query)

        outbound = self._client.build_request(
            request.method,
            origin_url,
            headers=content_headers(
                inbound,
                request.headers.get("host"),
                token if authenticated else None,
                identity=rewrite,
            ),
        )
        upstream = await self._client.send(outbound, stream=True)

        if rewrite and upstream.status_code == 200:
            response = await self._rewritten(upstream, decision, review, inbound, token)
        else:
            response = self._streamed(upstream)
        return decorate(response, origin_url)

    async def _rewritten(
        self,
        upstream: httpx.Response,
        decision: RoutingDecision,
        review: ReviewInfo,
        inbound: httpx.Headers,
        token: str | None,
    ) -> Response:
        try:
            await upstream.aread()
        finally:
            await upstream.aclose()
        body = await self.meta.rewrite(upstream.text, decision.pathname, review, inbound, token)
        response = Response(body.encode(upstream.encoding or "utf-8"), status_code=upstream.status_code)
        return _with_headers(response, response_headers(upstream.headers, materialized=True))

    def _streamed(self, upstream: httpx.Response) -> Response:
        response = StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        return _with_headers(response, response_headers(upstream.headers))
