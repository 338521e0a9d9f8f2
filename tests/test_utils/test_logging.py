"""Tests for log configuration."""

import logging

import pytest

from fair_scoring.utils.logging import HANDLER_NAME, PACKAGE_LOGGER, get_logger, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    sql_logger = logging.getLogger("sqlalchemy.engine")
    saved = (logger.level, list(logger.handlers), sql_logger.level)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    sql_logger.setLevel(saved[2])


def test_setup_is_idempotent(package_logger):
    """Running the app lifespan twice must not print every record twice."""
    setup_logging("debug")
    setup_logging("WARNING")

    ours = [h for h in package_logger.handlers if h.get_name() == HANDLER_NAME]
    assert len(ours) == 1
    assert package_logger.level == logging.WARNING


def test_module_loggers_inherit_package_level(package_logger):
    setup_logging("INFO")

    logger = get_logger("fair_scoring.services.promotion_service")

    assert logger.getEffectiveLevel() == logging.INFO


@pytest.mark.parametrize("show_sql,expected", [(False, logging.WARNING), (True, logging.INFO)])
def test_sql_logging_follows_flag(package_logger, show_sql, expected):
    setup_logging("INFO", show_sql=show_sql)

    assert logging.getLogger("sqlalchemy.engine").level == expected
