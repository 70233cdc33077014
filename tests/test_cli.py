"""Smoke tests for the review-router CLI."""

from __future__ import annotations

import json

import pytest

from review_router import __version__
from review_router.cli.main import app


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        app(["version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_resolve(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        app(["resolve", "abc--main--site--org.aem.reviews"])
    out = json.loads(capsys.readouterr().out)
    assert out["review_id"] == "abc"
    assert out["owner"] == "org"
    assert out["manifest_url"] == "https://main--site--org.aem.page/.snapshots/abc/.manifest.json"
