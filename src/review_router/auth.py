from __future__ import annotations

import hashlib
from collections.abc import Mapping

from starlette.requests import cookie_parser
from starlette.responses import HTMLResponse

from .models import Manifest

REVIEW_PASSWORD_COOKIE = "reviewPassword"


def password_digest(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def is_authenticated(manifest: Manifest, headers: Mapping[str, str], token: str | None = None) -> bool:
    """Open reviews always pass; protected ones need the org token or the password cookie."""
    password = manifest.review_password
    if not password:
        return True

    if token and headers.get("authorization") == f"token {token}":
        return True

    cookies = cookie_parser(headers.get("cookie") or "")
    return cookies.get(REVIEW_PASSWORD_COOKIE) == password_digest(password)


def unauthorized_response(login_script_url: str) -> HTMLResponse:
    body = (
        "<html><head><title>Unauthorized</title>"
        f'<script src="{login_script_url}"></script>'
        "</head><body><h1>Unauthorized</h1></body>"
    )
    return HTMLResponse(body, status_code=401, media_type="text/html")
