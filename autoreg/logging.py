"""Logging utilities for autoreg builds."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "autoreg"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the autoreg hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the autoreg logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[autoreg] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


@contextmanager
def debug_logging(enabled: bool = True) -> Iterator[None]:
    """Lower the autoreg logger and its handlers to DEBUG for the duration of the block.

    Previous levels are restored on exit, so one debug build does not leak
    into later builds in the same process.
    """
    if not enabled:
        yield
        return
    logger = logging.getLogger(_LOGGER_NAME)
    saved = [(logger, logger.level)] + [(handler, handler.level) for handler in logger.handlers]
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)
    try:
        yield
    finally:
        for target, level in saved:
            target.setLevel(level)


__all__ = ["configure_logging", "debug_logging", "get_logger"]
