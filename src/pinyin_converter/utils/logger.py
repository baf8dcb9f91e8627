from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s: %(message)s"

# chatty libraries that log every request at DEBUG
_QUIET = ("urllib3", "httpx", "httpcore")


def setup_logger(name: str = "pinyin_converter", level: str | int | None = None) -> logging.Logger:
    """Return the package logger, configured once.

    The level comes from *level*, else ``PINYIN_LOG_LEVEL``, else INFO. When
    running under uvicorn its error handlers are shared so conversion logs land
    in the server console.
    """
    if level is None:
        level = os.getenv("PINYIN_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for noisy in _QUIET:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if logger.handlers:
        return logger

    uvicorn_handlers = logging.getLogger("uvicorn.error").handlers
    if uvicorn_handlers:
        for h in uvicorn_handlers:
            logger.addHandler(h)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
