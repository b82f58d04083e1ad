from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s | %(message)s"
_PACKAGE_LOGGER = "sff_cli"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stderr handler to the package logger.

    Only the `sff_cli` logger is touched so that embedding applications keep
    control of the root logger.
    """
    resolved_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        package_logger.addHandler(handler)

    package_logger.setLevel(resolved_level)
    return package_logger


def create_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
