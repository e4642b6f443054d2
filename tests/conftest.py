import logging

import pytest


@pytest.fixture(autouse=True)
def reset_assetid_logger():
    yield
    logger = logging.getLogger("assetid")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
