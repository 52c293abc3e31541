"""Structured logging for formgen.

Every stage of the pipeline (schema mapping, rendering, validation) logs
through structlog. Records go to stderr so that markup printed by the CLI
on stdout is never interleaved with log lines.
"""

import logging
import sys
import time
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict

SERVICE_NAME = "formgen"


def add_service(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every record with the service name."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def name_schema(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Replace schema classes passed as log values with their names."""
    schema = event_dict.get("schema")
    if isinstance(schema, type):
        event_dict["schema"] = schema.__name__
    return event_dict


def _select_renderer(environment: str, json_logs: bool) -> Any:
    if json_logs or environment == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
    json_logs: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Set up structlog on top of the standard library logging module.

    Args:
        environment: development, testing or production; production always
            emits JSON
        log_level: Minimum level name (DEBUG/INFO/WARNING/ERROR)
        json_logs: Emit one JSON object per record
        stream: Where records are written, stderr when omitted
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_service,
            name_schema,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _select_renderer(environment, json_logs),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Cached loggers keep the processors of their first use
        cache_logger_on_first_use=environment == "production",
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach values such as form_id or command to all following records."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every value attached with bind_context."""
    structlog.contextvars.clear_contextvars()


class OperationTimer:
    """Time a pipeline step and log its start, progress and outcome.

    Failures are logged at error level and then propagate unchanged.
    """

    def __init__(
        self, logger: structlog.stdlib.BoundLogger, operation: str, **context: Any
    ):
        self.logger = logger.bind(operation=operation)
        self.operation = operation
        self.context = context
        self.started: float | None = None
        self.duration_ms: float | None = None

    def __enter__(self) -> "OperationTimer":
        self.started = time.perf_counter()
        self.logger.debug("Operation started", **self.context)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.started is None:
            return
        self.duration_ms = round((time.perf_counter() - self.started) * 1000, 2)

        if exc_type is not None:
            self.logger.error(
                "Operation failed",
                duration_ms=self.duration_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
                **self.context,
            )
            return
        self.logger.debug(
            "Operation completed", duration_ms=self.duration_ms, **self.context
        )

    def log_progress(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **kwargs)
