import logging


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a named logger, attaching a stream handler the first time it is requested."""
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
