"""
Logging configuration for the TransientDB shell.

Quiet by default: only warnings reach stderr. --verbose turns on DEBUG
output for the engine packages.
"""

import logging
import sys


ENGINE_LOGGERS = ("database", "indexing", "execution", "storage", "cli")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Attach a stderr handler to the root logger.

    Args:
        verbose: If True, log engine activity at DEBUG. Otherwise WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root_logger.addHandler(handler)

    for handler in root_logger.handlers:
        handler.setLevel(level)

    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(level)
