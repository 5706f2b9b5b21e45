"""
Unit tests for the logging helpers.
"""

import json
import logging
import sys

import pytest

from docking_control.utils.logging_config import (
    StructuredFormatter,
    configure_module_log_levels,
    get_logger,
    setup_logging,
    temporary_log_level,
)

LOGGER_NAME = "docking_control.tests.logging"


@pytest.fixture(autouse=True)
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestSetupLogging:
    def test_console_handler(self):
        logger = setup_logging(LOGGER_NAME, level=logging.DEBUG)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging(LOGGER_NAME)
        logger = setup_logging(LOGGER_NAME)
        assert len(logger.handlers) == 1

    def test_structured_file_output(self, tmp_path):
        log_file = tmp_path / "logs" / "session.log"
        logger = setup_logging(
            LOGGER_NAME, log_file=str(log_file), console=False, structured=True
        )
        logger.info("Docked", extra={"elapsed": 42.5})
        for handler in logger.handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["message"] == "Docked"
        assert record["level"] == "INFO"
        assert record["elapsed"] == 42.5

    def test_structured_formatter_exception(self):
        formatter = StructuredFormatter()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                LOGGER_NAME, logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )
        data = json.loads(formatter.format(record))
        assert "RuntimeError: boom" in data["exception"]


@pytest.mark.unit
class TestLevelHelpers:
    def test_get_logger_with_level(self):
        logger = get_logger(LOGGER_NAME, logging.ERROR)
        assert logger.level == logging.ERROR

    def test_temporary_level_restored(self):
        logger = get_logger(LOGGER_NAME, logging.WARNING)
        with temporary_log_level(LOGGER_NAME, logging.DEBUG):
            assert logger.level == logging.DEBUG
        assert logger.level == logging.WARNING

    def test_configure_module_levels(self):
        configure_module_log_levels({LOGGER_NAME: logging.CRITICAL})
        assert logging.getLogger(LOGGER_NAME).level == logging.CRITICAL
