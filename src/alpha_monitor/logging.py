"""Structured logging for the monitor, built on structlog with contextvars binding."""

import logging
import os

import structlog

#: Third-party loggers that are chatty at DEBUG.
_QUIET_LOGGERS = ("aiohttp", "ccxt", "asyncio", "uvicorn.access")


def _select_renderer(log_format: str | None) -> structlog.types.Processor:
    """Pick the final renderer: "json" lines or coloured console output."""
    fmt = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Route structlog and stdlib logging through one rendering pipeline.

    Context bound with structlog.contextvars (the pair under evaluation) is
    merged into every event. The renderer comes from ``log_format`` or, when
    omitted, the LOG_FORMAT environment variable ("json" or "console").
    Third-party loggers are also rendered by structlog but capped at WARNING.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _select_renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
