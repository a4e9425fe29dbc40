from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _propagating_docdrift_logger():
    """Undo CLI logging setup so caplog sees docdrift records in every test."""
    logger = logging.getLogger("docdrift")
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level
    for handler in handlers:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = propagate
    logger.setLevel(level)
