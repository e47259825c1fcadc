"""Logging configuration (JSON or plain text)."""

import logging
import sys
from pythonjsonlogger import jsonlogger

LOG_FORMATS = ("json", "text")

_FIELDS = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logger(
    name: str = "kamailio_exporter",
    level: str = "INFO",
    log_format: str = "json"
) -> logging.Logger:
    """
    Configure the exporter logger.

    Collectors log through child loggers of the returned logger, so a single
    call at startup configures the whole process.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for one JSON object per line, "text" for plain lines

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ValueError: If log_format is not supported
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format: {log_format} (expected one of {', '.join(LOG_FORMATS)})")

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        formatter = jsonlogger.JsonFormatter(_FIELDS, timestamp=True)
    else:
        formatter = logging.Formatter(_FIELDS)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger
