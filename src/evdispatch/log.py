"""Opt-in loguru setup for the dispatcher's debug output."""

from __future__ import annotations

import os
import sys
from typing import Any

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"


def _safe_message_filter(record: Any) -> bool:
    """Escape braces/angles in log messages to prevent format/tag errors."""
    if isinstance(record.get("message"), str):
        msg = record["message"]
        msg = msg.replace("{", "{{").replace("}", "}}").replace("<", "\\<")
        record["message"] = msg
    return True


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru and enable the package's log output.
    Level: verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise INFO."""
    level = "INFO"
    if verbose:
        level = "DEBUG"
    else:
        env_level = (os.environ.get("LOG_LEVEL") or "").upper()
        if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = env_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        filter=_safe_message_filter,
    )
    logger.enable("evdispatch")
