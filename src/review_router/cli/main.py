from __future__ import annotations

import argparse
import json

from review_router.settings import settings


def cmd_version() -> int:
    from review_router import __version__

    print(__version__)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from review_router.server import main

    main(host=args.host, port=args.port)
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    from review_router.models import ReviewInfo

    review = ReviewInfo.from_hostname(args.hostname)
    out = {
        "hostname": args.hostname,
        **review.model_dump(),
        "manifest_url": review.manifest_url(settings.aem_domain),
    }
    print(json.dumps(out, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="review-router")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version").set_defaults(func=lambda _a: cmd_version())

    serve = sub.add_parser("serve", help="Run the router under uvicorn")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    resolve = sub.add_parser("resolve", help="Decode a review hostname and print its manifest URL")
    resolve.add_argument("hostname")
    resolve.set_defaults(func=cmd_resolve)

    return p


def app(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    app()
