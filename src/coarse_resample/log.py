"""Logger setup for the command line tool."""

import logging

from .config import LOG_FORMAT


def setup_logger(logger_name="coarse_resample", logger_path=None,
                 logger_format=LOG_FORMAT, level=logging.INFO):
    """
    Attach a console handler (and a file handler when ``logger_path`` is set).

    Calling it again does not stack duplicate handlers.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(logger_format)

        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

        if logger_path:
            handler = logging.FileHandler(logger_path, encoding="utf-8", errors="strict")
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        # Set propagate to False in order to avoid double entries
        logger.propagate = False

    return logger
