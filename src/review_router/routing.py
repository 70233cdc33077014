from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from starlette.responses import Response

from .http import TEXT_PLAIN
from .models import ReviewInfo, Tier

SNAPSHOTS_PREFIX = "/.snapshots/"
PLAIN_HTML_SUFFIX = ".plain.html"


def is_snapshot_path(pathname: str) -> bool:
    return pathname.startswith(SNAPSHOTS_PREFIX) and not pathname.endswith(".manifest.json")


def snapshot_redirect(pathname: str) -> Response:
    """Send direct ``/.snapshots/{id}/...`` access back to the public path."""
    location = "/" + "/".join(pathname.split("/")[3:])
    return Response(
        "Redirect",
        status_code=302,
        headers={"location": location},
        media_type=TEXT_PLAIN,
    )


def normalize_pathname(pathname: str) -> str:
    if pathname.endswith(PLAIN_HTML_SUFFIX):
        return pathname.split(".")[0]
    return pathname


@dataclass(frozen=True)
class RoutingDecision:
    pathname: str
    tier: Tier
    is_page_snapshot: bool
    origin: str

    def url(self, query: str = "") -> str:
        return f"{self.origin}{self.pathname}" + (f"?{query}" if query else "")

    @property
    def last_segment(self) -> str:
        return self.pathname.split("/")[-1]


def classify(
    pathname: str,
    page_set: Collection[str],
    review: ReviewInfo,
    aem_domain: str = "aem",
) -> RoutingDecision:
    is_page_snapshot = normalize_pathname(pathname) in page_set
    routed = f"{review.snapshot_prefix}{pathname}" if is_page_snapshot else pathname

    if routed.endswith("/.manifest.json"):
        tier: Tier = "page"
    else:
        tier = "page" if is_page_snapshot else "live"

    return RoutingDecision(
        pathname=routed,
        tier=tier,
        is_page_snapshot=is_page_snapshot,
        origin=review.origin(tier, aem_domain),
    )
