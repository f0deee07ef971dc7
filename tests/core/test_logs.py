import logging

from traffic_agent_mcp.core.logs import PACKAGE_LOGGER, setup_logging


def test_setup_logging_is_idempotent():
    logger = logging.getLogger(PACKAGE_LOGGER)
    before = list(logger.handlers)
    try:
        setup_logging("DEBUG")
        setup_logging("WARNING")
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert logger.level == logging.WARNING
    finally:
        for h in logger.handlers[:]:
            if h not in before:
                logger.removeHandler(h)
        logger.setLevel(logging.NOTSET)
