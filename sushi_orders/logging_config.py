"""
Logging configuration for the sushi ordering service.

Usage:
    from sushi_orders.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
    PRICING_LOG_LEVEL: Level of the ``sushi_orders.pricing`` loggers only
        (default: same as LOG_LEVEL). The engine logs every priced line at
        DEBUG, so this traces pricing without the rest of the service.
"""
import logging
import os
import sys

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_level(value: str, default: str = "INFO") -> str:
    level = (value or "").strip().upper()
    return level if level in VALID_LEVELS else default


def setup_logging(level: str = None, pricing_level: str = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, reads from LOG_LEVEL env var, defaults to INFO.
        pricing_level: Level for the pricing engine loggers. If not provided,
               reads from PRICING_LOG_LEVEL, defaults to ``level``.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = _parse_level(level)

    if pricing_level is None:
        pricing_level = os.getenv("PRICING_LOG_LEVEL", level)
    pricing_level = _parse_level(pricing_level, default=level)

    numeric_level = getattr(logging, level)
    handler_level = min(numeric_level, getattr(logging, pricing_level))

    logging.basicConfig(
        level=handler_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger("sushi_orders").setLevel(numeric_level)
    logging.getLogger("sushi_orders.pricing").setLevel(getattr(logging, pricing_level))

    if handler_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured at %s level (pricing: %s)", level, pricing_level)
