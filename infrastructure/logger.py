# infrastructure/logger.py
"""
📝 LOGGING

Structured logging for the whole service.
Uses structlog on top of the standard logging module.
"""

import logging
import sys

import structlog

from config.settings import Settings

# ==========================================
# STRUCTLOG INITIALIZATION
# ==========================================

def setup_logging(settings: Settings):
    """
    Initializes logging.

    Called once when the application starts.
    Production logs are rendered as JSON, development logs for the console.
    """

    if settings.environment == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

# ==========================================
# LOGGER
# ==========================================

logger = structlog.get_logger()
