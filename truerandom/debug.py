"""Console logging for the package, switched by the DEBUG setting."""
from __future__ import annotations
import logging

PACKAGE_LOGGER = "truerandom"
FORMAT = "TrueRandom | %(message)s"


def configure(enabled: bool = True, stream=None) -> logging.Logger:
    """Attach a single console handler to the package logger."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(getattr(h, "_truerandom", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(FORMAT))
        handler._truerandom = True
        logger.addHandler(handler)
    set_enabled(enabled)
    return logger


def set_enabled(enabled: bool) -> None:
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if enabled else logging.WARNING)


def is_enabled() -> bool:
    return logging.getLogger(PACKAGE_LOGGER).isEnabledFor(logging.DEBUG)
