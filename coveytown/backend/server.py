"""Command line entry point that serves the town API with uvicorn."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .api import create_app
from .config import LOG_LEVELS, BackendSettings, load_settings
from .store import TownsStore

logger = logging.getLogger(__name__)


def parse_args(settings: BackendSettings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Covey Town server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=LOG_LEVELS,
        type=str.upper,
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    args = parse_args(settings, argv)
    configure_logging(args.log_level)

    app = create_app(store=TownsStore(server_salt=settings.server_salt))
    logger.info("Starting server on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
