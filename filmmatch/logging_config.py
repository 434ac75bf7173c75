"""
Structured JSON logging configuration for FilmMatch.

This module sets up structured logging using structlog with:
- JSON formatting for production
- Console formatting for development
- Request/user ID propagation
- Log scrubbing for credentials and PII (tokens, passwords, e-mail addresses)
- Configurable log levels via environment variables
"""

import os
import logging
import re
from typing import Any, Dict, Optional

import structlog

# Log level configuration via environment variable
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SERVICE_NAME = "filmmatch"

# Credential patterns embedded in free-form strings
SENSITIVE_PATTERNS = {
    "bearer_token": re.compile(r'(bearer\s+)([a-zA-Z0-9_\-\.]{20,})', re.IGNORECASE),
    "authorization": re.compile(r'(authorization["\s:=]+)([a-zA-Z0-9_\-\.]{20,})', re.IGNORECASE),
    "password": re.compile(r'(password["\s:=]+)(\S+)', re.IGNORECASE),
    "webhook_secret": re.compile(r'(secret["\s:=]+)([a-zA-Z0-9_\-]{8,})', re.IGNORECASE),
}

# Field names whose values are always fully redacted
SENSITIVE_FIELD_NAMES = {
    "password", "passwd", "pwd", "password_hash",
    "secret", "secret_key", "token", "auth", "authorization",
    "bearer", "access_token", "refresh_token", "api_key",
    "email",
}

EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b')

# Identifiers and bookkeeping fields that are never scrubbed
SAFE_FIELD_NAMES = {
    "request_id", "user_id", "film_id", "friend_id", "friend_request_id",
    "sender_id", "receiver_id", "category_id", "event", "timestamp",
    "level", "service", "environment", "duration_ms", "status_code",
}


def scrub_sensitive_data(value: Any, parent_key: Optional[str] = None) -> Any:
    """
    Recursively scrub sensitive data from log entries.

    Args:
        value: Value to scrub (dict, list, str, or other)
        parent_key: Parent key name for field-level redaction

    Returns:
        Scrubbed value with sensitive data replaced with [REDACTED]
    """
    key = parent_key.lower() if parent_key else None

    if isinstance(value, dict):
        return {k: scrub_sensitive_data(v, k) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [scrub_sensitive_data(item, parent_key) for item in value]

    if key in SAFE_FIELD_NAMES:
        return value
    if key in SENSITIVE_FIELD_NAMES:
        return "[REDACTED]"

    if isinstance(value, str):
        scrubbed = value
        for pattern in SENSITIVE_PATTERNS.values():
            scrubbed = pattern.sub(r'\1[REDACTED]', scrubbed)
        return EMAIL_PATTERN.sub('[EMAIL_REDACTED]', scrubbed)

    return value


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Add service name and deployment environment to every entry."""
    event_dict["service"] = SERVICE_NAME
    event_dict["environment"] = os.getenv("FILMMATCH_ENV", "local")
    return event_dict


def add_scrubbing(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Processor to scrub sensitive data from log entries."""
    return scrub_sensitive_data(event_dict)


def configure_structlog():
    """
    Configure structlog for the application.

    Sets up processors, formatters, and output based on environment.
    """
    is_dev = os.getenv("FLASK_ENV") == "development" or os.getenv("DEBUG") == "1"

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
        add_scrubbing,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_dev:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Optional logger name (defaults to calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


configure_structlog()
