"""Logging setup shared by the API, the sweeper and the live feeds.

Routine records (DEBUG, INFO) go to stdout and problems (WARNING and up) go
to stderr, so the container runtime can tell them apart.
"""

import logging
import sys

from school_portal.config import config

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"

# SQL echo and per-request access lines drown the sweep and registration logs
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


class BelowWarningFilter(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


def setup_logging():
    """Install the stdout/stderr handler pair on the root logger.

    The level comes from ``LOG_LEVEL``. Calling this again replaces the
    handlers instead of stacking new ones.
    """
    level_name = str(config.get("log_level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    routine = logging.StreamHandler(sys.stdout)
    routine.setLevel(logging.DEBUG)
    routine.addFilter(BelowWarningFilter())
    routine.setFormatter(formatter)

    problems = logging.StreamHandler(sys.stderr)
    problems.setLevel(logging.WARNING)
    problems.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(routine)
    root_logger.addHandler(problems)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
