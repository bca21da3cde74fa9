"""Structured logging for the collector.

Under cron or CI (COLLECTOR_RUN_ONCE=true) each invocation emits a handful of
lines and exits into a log collector, which wants LOG_FORMAT=json; a
continuous run watched on a terminal keeps the console renderer. Every line
emitted during a tick carries that tick's timestamp, bound by the scheduler.
"""

import logging
import os

import structlog


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Route structlog through stdlib logging with one shared renderer.

    Args:
        log_level: Root level name; unknown names fall back to INFO.
        log_format: "json" or "console". When None, the LOG_FORMAT
            environment variable decides, defaulting to console.
    """
    if log_format is None:
        log_format = os.environ.get("LOG_FORMAT", "console")
    log_format = log_format.lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # tick=<iso> from bind_contextvars reaches both concurrent flows
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # web3 is chatty at DEBUG
    logging.getLogger("web3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
