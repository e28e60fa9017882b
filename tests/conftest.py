"""Global pytest configuration."""

import logging

import pytest

from core.logging import LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def restore_app_logger():
    """Undo handlers and level set by configure_logging() in a test."""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
