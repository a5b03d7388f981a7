import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(module)s:%(lineno)d | %(message)s"


def setup_logger(name: str = "ticketing") -> logging.Logger:
    _logger = logging.getLogger(name)
    if _logger.handlers:
        return _logger

    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    _logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    _logger.addHandler(handler)
    _logger.propagate = False

    # sqlalchemy is noisy on INFO when echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return _logger


logger = setup_logger()
