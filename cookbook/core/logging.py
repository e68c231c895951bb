"""Logging configuration using Loguru.

Production output is one JSON object per line; development output is
colourised text. Standard library logging (uvicorn, sqlalchemy) is routed
through Loguru so everything ends up in the same sink.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that issued the record, skipping logging internals
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


_DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" or "text"
        is_development: Force human-readable output
    """
    logger.remove()
    logger.configure(extra={"name": "cookbook"})

    if log_format == "json" and not is_development:
        logger.add(
            sys.stdout,
            level=log_level.upper(),
            serialize=True,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=_DEV_FORMAT,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str):
    """Return a Loguru logger bound to ``name`` (usually ``__name__``)."""
    return logger.bind(name=name)
