#!/usr/bin/env python3
"""Console logging for tools built on scryfall_fetch."""

import logging
import sys
from typing import Iterable, Optional, TextIO

LIBRARY_LOGGER = "scryfall_fetch"

# Third-party loggers that log every connection at DEBUG
NOISY_LOGGERS = ("urllib3",)

CLI_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"


def setup_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> logging.Handler:
    """Attach a console handler to the library logger.

    Only ``scryfall_fetch`` records are routed here, so applications that
    configure the root logger themselves are not affected. The thread name
    is part of the debug format because gate waits happen on caller threads
    while grants come from the limiter thread.

    Args:
        level: Level for the library logger and its handler
        format_string: Custom format string (optional)
        stream: Where to write (default: stdout)
        quiet: Loggers raised to INFO

    Returns:
        The installed handler, so callers can remove it again

    """
    if format_string is None:
        format_string = DEBUG_FORMAT if level <= logging.DEBUG else CLI_FORMAT

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.setLevel(level)
    library_logger.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.INFO)

    return handler


def setup_cli_logging(verbose: bool = False) -> logging.Handler:
    """Set up logging for CLI tools.

    Args:
        verbose: If True, show DEBUG messages (gate waits, requests)

    """
    return setup_logging(logging.DEBUG if verbose else logging.INFO)
