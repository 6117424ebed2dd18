"""Logging configuration for vabridge.

Dispatchers never raise past a tick, so logs are the only place where
failures become visible to operators.
"""

import logging
import os
import sys


def configure_logging(level=None, format_string=None):
    """Configure logging for vabridge.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
    """
    # Get level from environment or use default
    if level is None:
        level = os.environ.get("VABRIDGE_LOG_LEVEL", "INFO")

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    if format_string is None:
        if numeric_level == logging.DEBUG:
            format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        else:
            format_string = "%(asctime)s %(levelname)s: %(message)s"

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Replace any existing configuration
    )

    # Reduce verbosity of third-party libraries
    logging.getLogger("redis").setLevel(logging.WARNING)

    if numeric_level == logging.DEBUG:
        logging.getLogger("vabridge").setLevel(logging.DEBUG)
    else:
        # Normal operation - INFO for engine and dispatchers, WARNING for adapters
        logging.getLogger("vabridge.server").setLevel(logging.INFO)
        logging.getLogger("vabridge.dispatch").setLevel(logging.INFO)
        logging.getLogger("vabridge.adapters").setLevel(logging.WARNING)


def get_logger(name):
    """Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
