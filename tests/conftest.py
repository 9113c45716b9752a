"""Shared pytest fixtures."""

import logging

import pytest

from carddav_sync.utils.logging import HTTP_LOGGER_NAMES, LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so later tests see default propagation."""
    yield
    for name in (LOGGER_NAME, *HTTP_LOGGER_NAMES):
        logger = logging.getLogger(name)
        if name == LOGGER_NAME:
            for handler in list(logger.handlers):
                handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
        logger.disabled = False
