"""
vault-csr Structured Logging Configuration.

Usage:
    from vaultcsr.utils.logging import get_logger, configure_logging

    # At process startup
    configure_logging(level="INFO", json_format=True)

    # In modules
    logger = get_logger(__name__)
    logger.info("Signing request", extra={"csr": "default/node-1"})
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "vaultcsr"

# Field names that must never reach a log sink
SENSITIVE_PATTERNS = frozenset(
    {
        "token",
        "secret",
        "secret_id",
        "jwt",
        "password",
        "private_key",
        "client_key",
    }
)

_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


def _is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SENSITIVE_PATTERNS)


def _filter_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact sensitive values from a dictionary."""
    filtered = {}
    for key, value in data.items():
        if _is_sensitive_key(key):
            filtered[key] = "[REDACTED]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive(value)
        else:
            filtered[key] = value
    return filtered


class StructuredFormatter(logging.Formatter):
    """JSON formatter for production output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            log_data["extra"] = _filter_sensitive(extra)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        message = record.getMessage()

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            pairs = " ".join(f"{k}={v}" for k, v in _filter_sensitive(extra).items())
            message = f"{message} {pairs}"

        formatted = f"{timestamp} {record.levelname:8} {record.name} {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def configure_logging(
    level: str = "INFO",
    json_format: Optional[bool] = None,
    stream: Any = None,
) -> None:
    """
    Configure logging for vault-csr components.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON output. Default: True in production
        stream: Output stream. Default: sys.stderr
    """
    if json_format is None:
        from .config import get_settings

        json_format = get_settings().is_production()

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_format else DevelopmentFormatter())
    root_logger.addHandler(handler)
    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the vaultcsr namespace."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "get_logger",
    "StructuredFormatter",
    "DevelopmentFormatter",
]
