"""Tests for logging configuration."""

import logging

from meal_dashboard.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("meal_dashboard")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging("debug")
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.DEBUG


def test_records_without_session_render() -> None:
    logger = logging.getLogger("meal_dashboard")
    logger.handlers.clear()
    configure_logging()
    handler = logger.handlers[0]
    record = logger.makeRecord(
        "meal_dashboard.test", logging.INFO, __file__, 1, "hello", (), None
    )

    assert handler.filter(record)
    assert handler.format(record) == "INFO: meal_dashboard.test: [-] hello"
