"""Structured logging configuration with structlog."""

import logging

import structlog
from structlog.types import EventDict, WrappedLogger

from mint.config import Settings

# Libraries that log every outbound or inbound request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _service_context(environment: str) -> structlog.types.Processor:
    def add_service(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", "mint-api")
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON output, or console output in debug / ``LOG_FORMAT=console``."""
    use_console = settings.debug or settings.log_format == "console"
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if use_console else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _service_context(settings.environment),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
