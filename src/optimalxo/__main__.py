"""Entry point for running OptimalXO via ``python -m optimalxo``."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from . import ui
from .config import Settings


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="optimalxo", description="Serve the OptimalXO web game")
    p.add_argument("--host", default=settings.host, help="Bind address")
    p.add_argument("--port", type=int, default=settings.port, help="Bind port")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    """Start the FastAPI-powered OptimalXO web server."""

    settings = Settings.from_env()
    ns = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ui.COMPUTER_MOVE_DELAY = settings.move_delay
    uvicorn.run(ui.app, host=ns.host, port=ns.port, reload=False)


if __name__ == "__main__":
    main()
