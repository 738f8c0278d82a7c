"""Structured JSON logging on stderr."""

import logging
import sys
from pythonjsonlogger import jsonlogger


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def parse_level(level: str) -> int:
    """
    Map a level name to its numeric value.

    Raises:
        ValueError: If ``level`` is not a standard logging level name
    """
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logger(name: str = "ec2_netreport", level: str = "INFO") -> logging.Logger:
    """
    Configure the report logger.

    Records are JSON lines on stderr, leaving stdout to the CSV report.
    Calling again with the same name replaces the previous handler.

    Args:
        name: Logger name; collectors log through children of it
        level: Level name (DEBUG, INFO, WARNING, ERROR)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ValueError: If ``level`` is unknown
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    ))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
