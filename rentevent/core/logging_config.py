"""
Logging for the rentevent catalog.

structlog sits on top of stdlib logging. Records are rendered as JSON
(python-json-logger) or as plain console lines, INFO and below go to
stdout, WARNING and above to stderr, and every record carries the service
identity plus the trace ID of the request being handled.
"""

import logging
import logging.config
from contextvars import ContextVar
from typing import Any, Dict, List, Optional
import structlog
from structlog.types import EventDict, Processor
from pythonjsonlogger import jsonlogger


_trace_id_context: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

# Library loggers and the level below which their records are dropped
LIBRARY_LOG_LEVELS = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "fastapi": "INFO",
    "asyncio": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "aiosqlite": "WARNING",
    "multipart": "WARNING",
}


def set_trace_id(trace_id: str) -> None:
    _trace_id_context.set(trace_id)


def get_trace_id() -> Optional[str]:
    """Trace ID of the request being handled, None outside a request."""
    return _trace_id_context.get()


def clear_trace_id() -> None:
    _trace_id_context.set(None)


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor: service identity and the current trace ID."""
    from rentevent.core.config import settings

    event_dict.setdefault("service", settings.SERVICE_NAME)
    event_dict.setdefault("version", settings.VERSION)
    event_dict.setdefault("environment", settings.ENVIRONMENT)

    trace_id = get_trace_id()
    if trace_id:
        event_dict["trace_id"] = trace_id
    return event_dict


def build_processors(console: bool) -> List[Processor]:
    """structlog processor chain ending in a console or JSON renderer."""
    processors: List[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if console:
        processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))
    else:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ])
    return processors


def configure_structlog(debug: bool = False, json_logs: bool = True) -> None:
    """Configure structlog; the console renderer is used only in debug without JSON."""
    structlog.configure(
        processors=build_processors(console=debug and not json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter for records that did not come through structlog.

    Fills in timestamp, upper-case level, logger name and trace_id when the
    record lacks them.
    """

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        # %(timestamp)s in the format string adds the key with a None value
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["logger"] = record.name

        trace_id = get_trace_id()
        if trace_id:
            log_record.setdefault("trace_id", trace_id)


class InfoAndBelowFilter(logging.Filter):
    """Keeps warnings and errors off stdout; the stderr handler takes them."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= logging.INFO


def _logger(level: str, handlers: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "handlers": ["stdout", "stderr"] if handlers is None else handlers,
        "level": level,
        "propagate": False,
    }


def get_logging_config(debug: bool = False, json_logs: bool = True) -> Dict[str, Any]:
    """dictConfig for stdlib logging.

    Args:
        debug: Let SQLAlchemy engine logs through at INFO
        json_logs: Render with CustomJsonFormatter instead of plain text

    Returns:
        Dictionary configuration for logging.config.dictConfig
    """
    from rentevent.core.config import settings

    app_level = settings.LOG_LEVEL.upper()
    formatter = "json" if json_logs else "console"

    loggers = {name: _logger(level) for name, level in LIBRARY_LOG_LEVELS.items()}
    loggers.update({
        "": _logger(app_level),
        "rentevent": _logger(app_level),
        # RequestLoggingMiddleware already logs every request
        "uvicorn.access": _logger("CRITICAL", handlers=[]),
        "sqlalchemy.engine": _logger("INFO" if debug else "WARNING"),
    })

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "rentevent.core.logging_config.CustomJsonFormatter",
                "format": "%(timestamp)s %(level)s %(name)s %(message)s",
            },
            "console": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "filters": {
            "info_and_below": {"()": "rentevent.core.logging_config.InfoAndBelowFilter"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
                "filters": ["info_and_below"],
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "level": "WARNING",
                "formatter": formatter,
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": loggers,
    }


def setup_logging(debug: bool = False, json_logs: bool = True) -> None:
    """Configure stdlib logging and structlog. Call once, before the first log call."""
    logging.config.dictConfig(get_logging_config(debug=debug, json_logs=json_logs))
    configure_structlog(debug=debug, json_logs=json_logs)

    get_logger(__name__).info(
        "logging_system_initialized",
        debug_mode=debug,
        json_logs=json_logs,
        log_level=logging.getLevelName(logging.root.level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("service_created", code="SERV-1a2b3c4d", provider="SoundCo")
    """
    return structlog.get_logger(name)
