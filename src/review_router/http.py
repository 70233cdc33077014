from __future__ import annotations

from collections.abc import Iterable, Mapping

import httpx

# Headers that describe a single connection and must not be forwarded.
HOP_BY_HOP = (
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
)

TEXT_PLAIN = "text/plain;charset=UTF-8"

# Conditional requests are disabled end-to-end.
CONDITIONAL = ("if-none-match", "if-modified-since")

# httpx adds these to every request unless removed from the client.
CLIENT_DEFAULTS = ("accept", "accept-encoding", "user-agent")


def default_timeout(seconds: float = 30.0) -> httpx.Timeout:
    return httpx.Timeout(seconds, connect=10.0, pool=10.0)


def default_limits() -> httpx.Limits:
    return httpx.Limits(max_connections=100, max_keepalive_connections=20)


class HttpClientFactory:
    """Creates the shared upstream httpx client.

    Keep one client per service process; do not create per-request.
    """

    @staticmethod
    def client(timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            timeout=default_timeout(timeout),
            limits=default_limits(),
            follow_redirects=False,
            transport=transport,
        )
        # Upstream sees only what the inbound request carried.
        for name in CLIENT_DEFAULTS:
            client.headers.pop(name, None)
        return client


def derive_headers(
    base: httpx.Headers,
    *,
    replace: Mapping[str, str] | None = None,
    drop: Iterable[str] = (),
) -> httpx.Headers:
    """Return a new header set; ``base`` is never mutated."""
    headers = base.copy()
    for name in drop:
        headers.pop(name, None)
    for name, value in (replace or {}).items():
        headers[name] = value
    return headers


def inbound_headers(raw: Iterable[tuple[bytes, bytes]] | Mapping[str, str]) -> httpx.Headers:
    return derive_headers(
        httpx.Headers(raw),
        drop=(*CONDITIONAL, *HOP_BY_HOP, "host", "content-length"),
    )


def token_authorization(token: str | None) -> dict[str, str]:
    return {"authorization": f"token {token}"} if token else {}


def origin_headers(inbound: httpx.Headers, token: str | None = None) -> httpx.Headers:
    """Headers for manifest, metadata and sitemap lookups on the page tier."""
    return derive_headers(
        inbound,
        replace={"accept-encoding": "identity", **token_authorization(token)},
        drop=("range",),
    )


def content_headers(
    inbound: httpx.Headers,
    host: str | None,
    token: str | None = None,
    identity: bool = False,
) -> httpx.Headers:
    extra: dict[str, str] = {}
    if host is not None:
        extra["x-forwarded-host"] = host
    if identity:
        extra["accept-encoding"] = "identity"
    extra.update(token_authorization(token))
    return derive_headers(inbound, replace=extra, drop=("x-push-invalidation",))


def response_headers(upstream: httpx.Headers, materialized: bool = False) -> list[tuple[str, str]]:
    skip = set(HOP_BY_HOP)
    if materialized:
        skip.update(("content-length", "content-encoding"))
    return [(name, value) for name, value in upstream.multi_items() if name.lower() not in skip]
