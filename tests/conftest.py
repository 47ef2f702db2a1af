"""Shared pytest fixtures"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_engine_logger():
    """Detach handlers installed by setup_logging so streams do not leak between tests"""
    yield
    logger = logging.getLogger("txn_engine")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
