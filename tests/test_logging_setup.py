import logging
import sys

import pytest

from promptpad import logging_setup


@pytest.fixture
def pkg_logger(monkeypatch):
    logger = logging.getLogger("promptpad")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    logger.handlers = []
    yield logger
    logger.handlers, logger.level, logger.propagate = saved


def test_configure_logging_once(pkg_logger):
    logging_setup.configure_logging("DEBUG")
    logging_setup.configure_logging("ERROR")

    assert pkg_logger.level == logging.DEBUG
    assert len(pkg_logger.handlers) == 1
    assert pkg_logger.handlers[0].stream is sys.stderr
    assert pkg_logger.propagate is False


def test_level_from_env(pkg_logger, monkeypatch):
    monkeypatch.setenv("PROMPTPAD_LOG_LEVEL", "warning")
    logging_setup.configure_logging()
    assert pkg_logger.level == logging.WARNING


def test_get_logger_is_silent_until_configured(pkg_logger):
    logging_setup.get_logger("promptpad.codec")
    assert [type(h) for h in pkg_logger.handlers] == [logging.NullHandler]
