"""
Logging configuration for FearlessYou.
"""

import sys
import logging
import structlog
from structlog.typing import FilteringBoundLogger

from ..config import get_config


def setup_logging() -> FilteringBoundLogger:
    """Setup structured logging for the application."""
    config = get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # Configure structlog
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.log_to_file:
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.logs_dir / "fearlessyou.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)

        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("fearlessyou")
    logger.info("Logging configured", level=config.log_level, to_file=config.log_to_file)

    return logger
