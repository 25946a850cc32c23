from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None, include_uvicorn: bool = False) -> logging.Logger:
    """Set up root logging for the headless runner and the server.

    The level comes from `level`, then the ``POND_LOG_LEVEL`` environment
    variable, then INFO. With `include_uvicorn` the server's access and error
    loggers follow the same level.
    """
    resolved = (level or os.getenv("POND_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S")

    pond_logger = logging.getLogger("pond")
    pond_logger.setLevel(resolved)
    if include_uvicorn:
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logging.getLogger(name).setLevel(resolved)
    return pond_logger
