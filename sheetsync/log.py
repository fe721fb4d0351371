"""
Logging setup for SheetSync.

Usage:
    from sheetsync.log import get_logger

    logger = get_logger(__name__)
    logger.info("Handshake accepted", extra={"connection_id": sid, "room_id": "sheet7"})
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from sheetsync import config


class ContextFormatter(logging.Formatter):
    """Prefixes the message with the collaboration context passed through `extra`."""

    CONTEXT_FIELDS = (
        ("connection_id", "conn"),
        ("user_id", "user"),
        ("room_id", "room"),
        ("msg_type", "msg"),
    )

    def format(self, record: logging.LogRecord) -> str:
        context = []
        for attr, label in self.CONTEXT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                context.append(f"{label}={value}")

        formatted = super().format(record)
        if context:
            return f"{formatted} [{' '.join(context)}]"
        return formatted


ROOT_LOGGER_NAME = "sheetsync"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Return a logger under the `sheetsync` hierarchy.

    Only the `sheetsync` logger owns a handler; module loggers hand their
    records up to it, so each record is printed once.
    """
    _configure_root_logger()

    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(_get_log_level(level))
    return logger


def _configure_root_logger() -> None:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if getattr(logger, "_sheetsync_configured", False):
        return

    logger.setLevel(_get_log_level())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        fmt="[%(levelname)-8s][%(asctime)s][%(name)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)

    # Root handlers (uvicorn, basicConfig) would print every record a second time
    logger.propagate = False
    logger._sheetsync_configured = True


def _get_log_level(level: Optional[str] = None) -> int:
    return getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
