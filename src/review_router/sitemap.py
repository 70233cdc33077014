from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlsplit

import httpx
from starlette.responses import Response

from .http import TEXT_PLAIN, origin_headers
from .models import ReviewInfo

logger = logging.getLogger(__name__)

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap-origin.xml")
ROBOTS_PATH = "/robots.txt"

TEXT_XML = "text/xml;charset=UTF-8"

_LOC_RE = re.compile(r"<loc>(.*?)</loc>")


def loc_pathnames(xml: str) -> list[str]:
    """Return the pathname of every ``<loc>`` entry.

    Raises ValueError when an entry is not an absolute URL.
    """
    out: list[str] = []
    for loc in _LOC_RE.findall(xml or ""):
        parts = urlsplit(loc.strip())
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"not an absolute URL: {loc!r}")
        out.append(parts.path or "/")
    return out


def merge_pages(*groups: Iterable[str]) -> list[str]:
    # De-dupe while preserving order.
    seen: set[str] = set()
    out: list[str] = []
    for group in groups:
        for path in group:
            if path in seen:
                continue
            seen.add(path)
            out.append(path)
    return out


def render_sitemap(hostname: str, pages: Iterable[str]) -> str:
    urls = "\n".join(f"<url><loc>https://{hostname}{path}</loc></url>" for path in pages)
    return (
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" xmlns:xhtml="http://www.w3.org/1999/xhtml">\n'
        f"    {urls}\n"
        "    </urlset>"
    )


def render_robots(hostname: str) -> str:
    return f"User-agent: *\nAllow: /\n\nSitemap: https://{hostname}/sitemap.xml"


def robots_response(hostname: str) -> Response:
    return Response(render_robots(hostname), media_type=TEXT_PLAIN)


class SitemapAggregator:
    """Builds the review sitemap from the manifest plus the origin's own sitemap."""

    def __init__(self, client: httpx.AsyncClient, aem_domain: str = "aem"):
        self._client = client
        self._aem_domain = aem_domain

    def origin_sitemap_url(self, review: ReviewInfo) -> str:
        return f"{review.origin('page', self._aem_domain)}/sitemap.xml"

    async def origin_pages(self, review: ReviewInfo, inbound: httpx.Headers, token: str | None = None) -> list[str]:
        """Best-effort: any failure yields an empty list."""
        url = self.origin_sitemap_url(review)
        try:
            r = await self._client.get(url, headers=origin_headers(inbound, token))
            if r.status_code != 200:
                logger.info("No sitemap index found at %s (%s)", url, r.status_code)
                return []
            return loc_pathnames(r.text)
        except (httpx.HTTPError, ValueError) as e:
            logger.info("No sitemap index found at %s: %s", url, e)
            return []

    async def render(
        self,
        hostname: str,
        pages: Iterable[str],
        review: ReviewInfo,
        inbound: httpx.Headers,
        token: str | None = None,
    ) -> Response:
        indexed = await self.origin_pages(review, inbound, token)
        body = render_sitemap(hostname, merge_pages(pages, indexed))
        return Response(body, media_type=TEXT_XML)
