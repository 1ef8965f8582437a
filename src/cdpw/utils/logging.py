"""Logging setup for planner runs."""

import logging
import sys
from typing import Optional

# Modules that log once per search iteration
SEARCH_LOGGERS = ("cdpw.search", "cdpw.constraints")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    search_level: Optional[int] = None
):
    """Setup logging configuration.

    Args:
        level: Logging level
        log_file: Optional log file path
        search_level: Level for the per-iteration search loggers (defaults
            to level); set to logging.DEBUG to trace multiplier updates
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=min(level, search_level or level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    logging.getLogger("cdpw").setLevel(level)
    for name in SEARCH_LOGGERS:
        logging.getLogger(name).setLevel(search_level or level)
