"""Logging setup for the promptly CLI.

Every module logs through a child of the "promptly" logger, so configuring
that one logger covers the tracker, session, bridge and collaborators.
"""

from __future__ import annotations

import logging
import sys

from promptly.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the promptly application.

    Sets up the 'promptly' logger with the specified level, format, and
    optional file handler. Calling it again replaces the handlers instead
    of stacking duplicates.

    Args:
        config: Level, format and optional log file. None means INFO
                on stderr only.
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("promptly")
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.info("Logging initialized at %s level", config.level)
