"""Logging configuration for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route lbconv log records through a Rich handler on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("lbconv")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
