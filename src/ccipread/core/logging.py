import json
import logging
import sys
from typing import TextIO

# Default Logger Name
LOGGER_NAME = "ccipread"


class JsonFormatter(logging.Formatter):
    """One JSON object per record (good for Datadog/Splunk)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure the ccipread logger.

    Args:
        level: Logging level (e.g., logging.INFO, "DEBUG")
        json_format: Whether to emit one JSON object per line
        stream: Destination stream (default: stdout)

    Returns:
        The configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-configuring replaces the previous handler
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a child logger of ccipread."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
