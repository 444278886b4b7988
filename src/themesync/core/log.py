"""Logging helpers shared by the sync engine and the CLI.

Adds a SUCCESS level between INFO and WARNING so completed operations
can be told apart from progress messages.
"""

from __future__ import annotations

import logging

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log a message at SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def log_messages(logger: logging.Logger, level: int, messages: list[str]) -> None:
    """Log each message indented under a preceding headline."""
    for message in messages:
        logger.log(level, "  %s", message)
