"""
Logging setup shared by the CLI and the dashboard.

Library modules only call logging.getLogger(__name__); setup_logger() is
called once by whichever entry point is running.
"""

import logging
import sys
from typing import Final
from logging import Logger, StreamHandler


LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(name: str = "spendcity", level: str = "INFO") -> Logger:
    """
    Configure root logging to stdout and return a named logger.

    Parameters
    ----------
    name : str, optional
        Logger name, usually the calling module's __name__.
    level : str, optional
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL", any case.
        Unknown values fall back to "INFO".

    Returns
    -------
    Logger
        The configured logger.
    """
    log_levels: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    log_level = log_levels.get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,
    )

    return logging.getLogger(name)
