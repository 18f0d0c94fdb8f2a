"""Structured logging setup using structlog with per-sweep correlation IDs."""

import logging
import uuid
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

# Correlation ID shared by every log line of one poll sweep
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def add_correlation_id(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp the current sweep's correlation id onto the event."""
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Configure JSON logging for stdlib and structlog.

    Args:
        log_level: Level name, already validated by Settings
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", level=level)

    # discord.py logs through stdlib; keep its gateway chatter out of INFO
    logging.getLogger("discord").setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to a module name."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for current async context."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    """Get correlation ID from current async context, or empty string."""
    return correlation_id_var.get()


def new_correlation_id() -> str:
    """Generate a short correlation ID, set it, and return it.

    Returns:
        12-character hex ID now active for the current context
    """
    correlation_id = uuid.uuid4().hex[:12]
    set_correlation_id(correlation_id)
    return correlation_id
