"""Logging setup for the ``mandelbrot`` package."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Send ``mandelbrot.*`` records to stdout and, with ``log_file``, to that file too.

    Calling it again replaces the handlers installed by the previous call.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    logger = logging.getLogger("mandelbrot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
