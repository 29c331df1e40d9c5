"""Console logging for extraction and rule modules."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """Configures and returns a logger with Rich formatting."""
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel((level or os.getenv("DXCODER_LOG_LEVEL", "INFO")).upper())

    console = Console(stderr=True)
    handler = RichHandler(console=console, show_time=False, show_path=False)

    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    # The structured handler on the "dxcoder" namespace would print it twice
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get an existing logger or create a new one under ``dxcoder.``."""
    if not name.startswith("dxcoder"):
        name = f"dxcoder.{name}"
    return setup_logger(name)
