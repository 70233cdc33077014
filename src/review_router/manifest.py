from __future__ import annotations

import logging

import httpx

from .errors import ManifestError, ReviewNotFound
from .http import origin_headers
from .models import Manifest, ReviewInfo

logger = logging.getLogger(__name__)


class ManifestClient:
    """Loads the per-review manifest from the page tier.

    The manifest is fetched on every call; nothing is cached between requests.
    """

    def __init__(self, client: httpx.AsyncClient, aem_domain: str = "aem"):
        self._client = client
        self._aem_domain = aem_domain

    def url_for(self, review: ReviewInfo) -> str:
        return review.manifest_url(self._aem_domain)

    async def request(self, review: ReviewInfo, inbound: httpx.Headers, token: str | None = None) -> httpx.Response:
        """Fetch the manifest document; only a 404 is terminal at this point."""
        url = self.url_for(review)
        r = await self._client.get(url, headers=origin_headers(inbound, token))
        if r.status_code == 404:
            logger.info("Review not found: %s", url)
            raise ReviewNotFound()
        return r

    def parse(self, r: httpx.Response) -> Manifest:
        if r.status_code != 200:
            logger.warning("Manifest fetch failed for %s: %s", r.request.url, r.status_code)
            raise ManifestError(r.status_code)
        return Manifest.model_validate(r.json())

    async def fetch(self, review: ReviewInfo, inbound: httpx.Headers, token: str | None = None) -> Manifest:
        return self.parse(await self.request(review, inbound, token))
