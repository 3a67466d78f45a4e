"""Tests for the stdout/stderr logging split"""

import logging

import pytest

from school_portal import logging_config
from school_portal.logging_config import BelowWarningFilter, setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    noisy_levels = {
        name: logging.getLogger(name).level for name in logging_config.NOISY_LOGGERS
    }

    yield root_logger

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


def test_routine_and_problem_records_are_split(restore_root_logger, monkeypatch):
    monkeypatch.setitem(logging_config.config, "log_level", "info")

    setup_logging()
    setup_logging()

    handlers = restore_root_logger.handlers
    assert len(handlers) == 2
    assert restore_root_logger.level == logging.INFO
    routine, problems = handlers
    assert any(isinstance(f, BelowWarningFilter) for f in routine.filters)
    assert problems.level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_below_warning_filter():
    def record(level):
        return logging.LogRecord("school_portal", level, __file__, 1, "msg", None, None)

    below = BelowWarningFilter()

    assert below.filter(record(logging.INFO))
    assert not below.filter(record(logging.ERROR))
