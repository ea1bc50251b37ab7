"""
Utility functions and helpers.

Components:
    - setup_logging: Route the package's log records to a Rich console handler

Example:
    ```python
    from layout_schema.utils import setup_logging

    setup_logging(level="DEBUG")
    ```
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "layout_schema"


def setup_logging(level: Union[int, str] = logging.INFO, console: Optional[Console] = None) -> logging.Logger:
    """
    Configure logging for the layout_schema package.

    Calling it again replaces the handler instead of adding a second one.

    Args:
        level: Logging level name or number
        console: Rich console to log to (stderr console if None)

    Returns:
        logging.Logger: The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["setup_logging"]
