"""
CALMe Logging Configuration

Structured logging with:
- Session ID binding for conversation tracing
- Redaction of user utterances and personal profile fields
- JSON output outside development, console output in development

PRIVACY: Raw user text must never reach INFO-level logs.
Log lengths, categories and confidences instead.
"""

import logging
import sys
from typing import Any

import structlog

from calme import __version__
from calme.config.settings import Settings


# Keys whose values are replaced before rendering
SENSITIVE_PATTERNS: frozenset[str] = frozenset({
    "utterance",
    "user_text",
    "phone",
    "contact",
    "emergency_contacts",
    "safe_space_location",
    "backup_location",
})


def _redact_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Redact sensitive data from log entries.

    Scans all keys in the event dictionary and redacts values
    for any key containing sensitive patterns.

    Args:
        logger: Logger instance (unused but required by structlog)
        method_name: Log method name (unused but required by structlog)
        event_dict: Log event dictionary

    Returns:
        Sanitized event dictionary
    """
    def redact_value(key: str, value: Any) -> Any:
        key_lower = key.lower()
        for pattern in SENSITIVE_PATTERNS:
            if pattern in key_lower:
                return "[REDACTED]"

        if isinstance(value, dict):
            return {k: redact_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [redact_value(key, item) for item in value]

        return value

    return {key: redact_value(key, value) for key, value in event_dict.items()}


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add service-level context to all log entries."""
    event_dict["service"] = "calme-dialogue"
    event_dict["version"] = __version__
    return event_dict


def get_processors(is_development: bool) -> list[Any]:
    """
    Get structlog processors based on environment.

    Args:
        is_development: Whether running in development mode

    Returns:
        List of log processors
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive_data,
        _add_service_context,
    ]

    if is_development:
        shared_processors.extend([
            structlog.processors.ExceptionPrettyPrinter(),
            structlog.dev.ConsoleRenderer(colors=True),
        ])
    else:
        shared_processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])

    return shared_processors


def resolve_log_level(settings: Settings) -> int:
    """Debug mode forces DEBUG regardless of the configured level."""
    if settings.debug:
        return logging.DEBUG
    return getattr(logging, settings.log_level.upper())


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging.

    Sets up structlog with appropriate processors for the environment.
    Should be called once by the host during startup.

    Args:
        settings: Application settings
    """
    is_development = settings.env == "development"
    log_level = resolve_log_level(settings)

    structlog.configure(
        processors=get_processors(is_development),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_session_context(session_id: str, graph_id: str) -> None:
    """
    Bind conversation identifiers to the current context.

    All subsequent log entries in this context carry the session
    and graph identifiers.

    Args:
        session_id: Conversation session identifier
        graph_id: Active dialogue graph
    """
    structlog.contextvars.bind_contextvars(session_id=session_id, graph_id=graph_id)


def clear_context() -> None:
    """Clear all context variables (call at end of a turn)."""
    structlog.contextvars.clear_contextvars()
