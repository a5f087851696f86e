"""Logging setup shared by the CLI and the web app."""

from __future__ import annotations

import logging
import os

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# LOG_LEVEL_<KEY> env var -> package logger it controls
_MODULE_LOGGERS: dict[str, str] = {
    "PRICING": "Swapper.pricing",
    "SERVICES": "Swapper.services",
    "WEB": "Swapper.web",
    "DATA": "Swapper.data",
}

# Third-party loggers that are too chatty at INFO
_QUIET_LIBRARIES: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")


def _resolve_level(name: str | None, default: int | None) -> int | None:
    """Map a level name like ``"debug"`` to its number, or *default* if unknown."""
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the root logger.

    Precedence: verbose, then quiet, then *level*, then ``LOG_LEVEL``, then INFO.
    ``force=True`` replaces handlers uvicorn may already have installed.
    """
    if verbose:
        root_level = logging.DEBUG
    elif quiet:
        root_level = logging.WARNING
    else:
        requested = level or os.environ.get("LOG_LEVEL", "")
        root_level = _resolve_level(requested, logging.INFO) or logging.INFO

    logging.basicConfig(level=root_level, format=LOG_FORMAT, force=True)

    # Request logging middleware covers access logs; httpx would log signed OKX URLs
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    for key, logger_name in _MODULE_LOGGERS.items():
        override = _resolve_level(os.environ.get(f"LOG_LEVEL_{key}"), None)
        if override is not None:
            logging.getLogger(logger_name).setLevel(override)
