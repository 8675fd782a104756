"""Tests for eventstack logging helpers."""

import logging

import pytest

from eventstack.utils.logging import LOGGER_NAME, configure_logging, get_logger


@pytest.fixture
def package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    yield logger
    for h in logger.handlers[:]:
        if h not in saved_handlers:
            logger.removeHandler(h)
    for h in saved_handlers:
        if h not in logger.handlers:
            logger.addHandler(h)
    logger.setLevel(saved_level)


def test_get_logger_names():
    assert get_logger().name == "eventstack"
    assert get_logger(__name__).name == __name__


def test_level_from_environment(monkeypatch, package_logger):
    monkeypatch.setenv("EVENTSTACK_LOG_LEVEL", "debug")
    configure_logging(force=True)
    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == 1


def test_configure_twice_keeps_one_stderr_handler(package_logger):
    configure_logging("WARNING", force=True)
    configure_logging("INFO")
    stream_handlers = [h for h in package_logger.handlers if isinstance(h, logging.StreamHandler)]
    assert len(stream_handlers) == 1
    assert package_logger.level == logging.INFO


def test_root_logger_untouched(package_logger):
    root_handlers = logging.getLogger().handlers[:]
    configure_logging("INFO", force=True)
    assert logging.getLogger().handlers == root_handlers
