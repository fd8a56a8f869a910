import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Send fleet log records to the console at the given level."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger('fleet')
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        logger.addHandler(handler)
    return logger
