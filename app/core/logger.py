import logging

from core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def get_logger(name: str):
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger = logging.getLogger(name)
    return logger

# Example usage: logger = get_logger(__name__)
