"""Logging setup for scripts and notebooks using the toolbox."""

import logging


LOG_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(level: int | str = logging.INFO, *, fmt: str = LOG_FORMAT) -> logging.Logger:
    """Attach a stream handler to the root logger and lower the package logger to ``level``.

    Library modules only ever log through ``logging.getLogger(__name__)``; calling this
    is optional and meant for interactive use.

    Returns:
        The ``recstats`` package logger.
    """
    logging.basicConfig(level=level, format=fmt)
    logger = logging.getLogger("recstats")
    logger.setLevel(level)
    return logger


__all__ = ["LOG_FORMAT", "configure_logging"]
