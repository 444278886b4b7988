"""Console logging for the themesync CLI."""

from __future__ import annotations

import logging

import click

from themesync.core.log import SUCCESS

LEVEL_COLORS = {
    logging.DEBUG: "bright_black",
    SUCCESS: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ClickEchoHandler(logging.Handler):
    """Logging handler that writes through click.echo.

    Warnings and errors go to stderr. Levels other than INFO are
    colored.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            color = LEVEL_COLORS.get(record.levelno)
            if color:
                msg = click.style(msg, fg=color)
            click.echo(msg, err=record.levelno >= logging.WARNING)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route the themesync logger to the console.

    Args:
        verbose: Show debug messages.

    Returns:
        The configured package logger.
    """
    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("themesync")
    for existing in package_logger.handlers[:]:
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False
    return package_logger
