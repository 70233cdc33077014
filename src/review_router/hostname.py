from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import ReviewInfo
from .settings import DEFAULT_HOSTNAME


def is_reviews_hostname(hostname: str | None, suffixes: Iterable[str]) -> bool:
    return bool(hostname) and any(hostname.endswith(s) for s in suffixes)


def resolve_hostname(
    hostname: str | None,
    query: Mapping[str, str],
    suffixes: Iterable[str] = (".hlx.reviews", ".aem.reviews"),
    default: str = DEFAULT_HOSTNAME,
) -> str:
    """Pick the hostname that carries the review quadruple.

    Reviews domains are used as-is; anything else (local development, tunnels)
    falls back to the ``hostname`` query parameter and then to ``default``.
    """
    if is_reviews_hostname(hostname, suffixes):
        return hostname  # type: ignore[return-value]
    return query.get("hostname") or default


def resolve_review(
    hostname: str | None,
    query: Mapping[str, str],
    suffixes: Iterable[str] = (".hlx.reviews", ".aem.reviews"),
    default: str = DEFAULT_HOSTNAME,
) -> tuple[str, ReviewInfo]:
    resolved = resolve_hostname(hostname, query, suffixes, default)
    return resolved, ReviewInfo.from_hostname(resolved)
