import logging.config
from typing import Any, Dict

import structlog


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structured logging.

    Args:
        log_level: Standard logging level name
        log_format: ``console`` for human-readable lines, ``json`` for one JSON object per event
    """
    log_level = log_level.upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": renderer,
            },
        },
        "handlers": {
            "default": {
                "level": log_level,
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "": {
                "handlers": ["default"],
                "level": log_level,
                "propagate": True,
            },
        }
    })

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def log_error(logger: Any, error: Exception, context: Dict[str, Any] = None) -> None:
    """Log a fatal generator error with its exit code and any per-field details."""
    error_details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "exit_code": getattr(error, "exit_code", 1),
        **(context or {})
    }
    field_errors = getattr(error, "errors", None)
    if field_errors:
        error_details["fields"] = [field for field, _ in field_errors]
    logger.error("generation_failed", **error_details)
