"""Logging configuration for the application."""

import logging
import sys
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

APP_LOGGER = "app.bullion_tracker"

# Price adapters, the proxy quote client and the push client log every
# upstream request at DEBUG
UPSTREAM_LOGGER = f"{APP_LOGGER}.infrastructure.external"

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "uvicorn.access",
    "sqlalchemy.engine",
    "celery.beat",
)


def setup_logging(level: LogLevel = "INFO", upstream_level: LogLevel = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Level for the application's own loggers.
        upstream_level: Level for the upstream HTTP clients, kept separate so
            a DEBUG run is not flooded with one line per provider request.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger(APP_LOGGER).setLevel(level)
    logging.getLogger(UPSTREAM_LOGGER).setLevel(upstream_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: The name for the logger (typically __name__).

    Returns:
        A configured logger instance.
    """
    return logging.getLogger(name)
