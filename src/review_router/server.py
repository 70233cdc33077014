from __future__ import annotations

import logging

import uvicorn

from .app import create_app
from .settings import settings


def main(host: str | None = None, port: int | None = None) -> None:
    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = uvicorn.Config(
        create_app(settings),
        host=host or settings.bind_host,
        port=port or settings.bind_port,
        log_level=level.lower(),
        loop="uvloop",
        http="httptools",
        proxy_headers=True,
    )
    uvicorn.Server(config).run()


if __name__ == "__main__":
    main()
