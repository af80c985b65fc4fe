"""
Structured Logging Setup

Configured once, on first import of expense_splitter.config, so that every
module that reads settings (the engine included) logs through the same
structlog pipeline and honours the configured level.
"""

import logging
from typing import Optional

import structlog

from expense_splitter.config.settings import get_settings


def resolve_log_level() -> str:
    """debug_mode forces DEBUG; otherwise the configured log_level applies."""
    app_settings = get_settings().app
    return "DEBUG" if app_settings.debug_mode else app_settings.log_level


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog for the local structured log.

    Defaults come from AppSettings (log_level, debug_mode, log_json).
    """
    level = level or resolve_log_level()
    json = get_settings().app.log_json if json is None else json

    logging.basicConfig(format="%(message)s", level=getattr(logging, level))
    logging.getLogger().setLevel(getattr(logging, level))

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
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


configure_logging()
