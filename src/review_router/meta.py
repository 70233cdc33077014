from __future__ import annotations

import logging
import re
from collections.abc import Collection, Iterable

import httpx

from .errors import MetadataError
from .http import origin_headers
from .models import MetadataSheet, MetaRule, ReviewInfo

logger = logging.getLogger(__name__)

METADATA_PATH = "/metadata.json"
HEAD_CLOSE = "</head>"


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    # Only ``**`` is translated; other characters keep their regex meaning.
    return re.compile(pattern.replace("**", ".*"))


def should_rewrite_meta(page_set: Collection[str], pathname: str) -> bool:
    """HTML pages only: the review ships metadata.json and the last segment has no extension."""
    return METADATA_PATH in page_set and "." not in pathname.split("/")[-1]


def meta_tag(name: str, value: str) -> str:
    return f'<meta name="{name}" content="{value}">\n'


def rewrite_head(html: str, rules: Iterable[MetaRule], pathname: str) -> str:
    head, _, rest = html.partition(HEAD_CLOSE)
    for rule in rules:
        if not glob_to_regex(rule.pattern).search(pathname):
            continue
        for name, value in rule.fields:
            head = head.replace(f'<meta name="{name}"', f'<meta name="{name}-rewritten"', 1)
            head += meta_tag(name, value)
    return f"{head}{HEAD_CLOSE}{rest}"


class MetaRewriter:
    def __init__(self, client: httpx.AsyncClient, aem_domain: str = "aem"):
        self._client = client
        self._aem_domain = aem_domain

    async def load_rules(self, review: ReviewInfo, inbound: httpx.Headers, token: str | None = None) -> list[MetaRule]:
        url = review.metadata_url(self._aem_domain)
        r = await self._client.get(url, headers=origin_headers(inbound, token))
        if r.status_code != 200:
            raise MetadataError(f"metadata.json returned {r.status_code} for {url}")
        try:
            sheet = MetadataSheet.model_validate(r.json())
        except ValueError as e:
            raise MetadataError(f"invalid metadata.json at {url}: {e}") from e
        return sheet.rules()

    async def rewrite(
        self,
        html: str,
        pathname: str,
        review: ReviewInfo,
        inbound: httpx.Headers,
        token: str | None = None,
    ) -> str:
        rules = await self.load_rules(review, inbound, token)
        logger.debug("Applying %d meta rules to %s", len(rules), pathname)
        return rewrite_head(html, rules, pathname)
