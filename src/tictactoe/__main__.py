"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import logging
import os

import uvicorn

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def main() -> None:
    """Start the FastAPI-powered Tic-Tac-Toe web server."""

    host = os.environ.get("TICTACTOE_HOST", "0.0.0.0")
    port = int(os.environ.get("TICTACTOE_PORT", "8000"))
    log_level = (os.environ.get("TICTACTOE_LOG_LEVEL", "INFO") or "INFO").upper()

    setup_logging(log_level)
    uvicorn.run(
        "tictactoe.ui:app",
        host=host,
        port=port,
        reload=False,
        log_level=log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
