"""
Logging Configuration

Library modules under ``trajectory_service`` only create loggers with
``logging.getLogger(__name__)`` and never configure handlers. The entry
points (``demo.py`` and the HTTP service) call ``configure_logging`` once.

Propagation warnings (Kepler or geodetic non-convergence) are emitted per
sample and can be noisy on long spans, so the package logger level can be
set apart from the root level.

Usage:
    from logging_config import configure_logging, get_logger

    configure_logging("DEBUG", package_level="WARNING")
    logger = get_logger(__name__)
    logger.info("Sampled 541 points")
"""

import logging
import sys
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "trajectory_service"

# Request logging from the development server
WERKZEUG_LOGGER = "werkzeug"

Level = Union[int, str]


def _resolve_level(level: Level) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def configure_logging(
    level: Level = logging.INFO,
    log_file: Optional[str] = None,
    package_level: Optional[Level] = None,
    quiet_requests: bool = False,
) -> None:
    """
    Configure the root logger for a command-line or service run.

    Parameters
    ----------
    level : int or str
        Root level, e.g. ``logging.DEBUG`` or ``"DEBUG"``
    log_file : str, optional
        Also write to this file
    package_level : int or str, optional
        Level for the ``trajectory_service`` loggers; defaults to ``level``
    quiet_requests : bool
        Raise the werkzeug request log to WARNING
    """
    root_level = _resolve_level(level)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    # Replaces handlers installed by an earlier call
    logging.basicConfig(
        level=root_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if package_level is None:
        package_logger.setLevel(logging.NOTSET)
    else:
        package_logger.setLevel(_resolve_level(package_level))

    if quiet_requests:
        logging.getLogger(WERKZEUG_LOGGER).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
