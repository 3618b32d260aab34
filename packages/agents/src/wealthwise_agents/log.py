"""Structured logging setup.

Modules log through ``structlog.get_logger()``; this wires structlog onto
the standard library logger at the configured level. Production emits JSON
lines, other environments a readable console format.
"""

import logging
import sys

import structlog

from .config import WealthWiseConfig


def configure_logging(config: WealthWiseConfig) -> None:
    """Configure structlog and the root logger from ``config``."""
    level = getattr(logging, config.log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.is_production
        else structlog.dev.ConsoleRenderer(colors=False)
    )
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
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
