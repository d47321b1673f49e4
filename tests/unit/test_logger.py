"""Unit tests for logging setup."""

import logging

from docsign.utils.logger import CHATTY_LOGGERS, get_logger, logger, quiet_library_loggers, setup_logger


class TestLogger:
    """Test cases for the package logger."""

    def test_setup_is_idempotent(self):
        first = setup_logger("docsign.test_setup")
        second = setup_logger("docsign.test_setup")
        assert first is second
        assert len(second.handlers) == 1

    def test_component_logger_is_child(self):
        child = get_logger("store")
        assert child.name == "docsign.store"
        assert child.parent is logger

    def test_library_loggers_quiet_outside_debug(self):
        quiet_library_loggers(debug=False)
        for name in CHATTY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_library_loggers_verbose_in_debug(self):
        quiet_library_loggers(debug=True)
        try:
            assert logging.getLogger("httpx").level == logging.DEBUG
        finally:
            quiet_library_loggers(debug=False)
