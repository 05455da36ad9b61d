"""Logging configuration."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field
from rich.console import Console
from rich.logging import RichHandler

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseModel):
    """Logging settings.

    Attributes:
        level: Root level for the ``skillsync`` logger.
        show_path: Show the emitting module and line.
        rich_tracebacks: Render tracebacks with rich.
    """

    level: LogLevel = Field(default="WARNING", description="Log level")
    show_path: bool = Field(default=False, description="Show source location")
    rich_tracebacks: bool = Field(default=False, description="Render tracebacks with rich")


def configure_logging(config: LoggingConfig, console: Console | None = None) -> logging.Logger:
    """Attach a ``RichHandler`` to the ``skillsync`` logger.

    Calling it again replaces the handler instead of stacking another one.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("skillsync")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=config.show_path,
        rich_tracebacks=config.rich_tracebacks,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(config.level)
    return logger
