"""Structured logging for the scanner: structlog over stdlib logging.

Rendering is controlled by the LOG_FORMAT environment variable:
"json" for machine-readable output, "console" (default) for development.
Per-request context (profile, symbol) is bound through structlog.contextvars
so it survives the asyncio fan-out.
"""

import logging
import os

import structlog

#: Third-party loggers that are chatty at INFO.
_QUIET_LOGGERS = ("ccxt", "ccxt.base.exchange", "urllib3", "uvicorn.access")


def _pre_chain() -> list[structlog.types.Processor]:
    """Processors applied to structlog and foreign (ccxt, uvicorn) records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _final_processors(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Route structlog and stdlib logging through one ProcessorFormatter.

    Args:
        log_level: Root level name, e.g. "DEBUG" to see indicator fallbacks.
        log_format: "json" or "console"; LOG_FORMAT is read when omitted.
    """
    log_format = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
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
                *_final_processors(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: object) -> None:
    """Replace the per-request logging context (e.g. profile=..., symbol=...)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
