"""Centralized logging utilities for the Brain Nucleus client.

This module provides:
- Logging configuration from BrainClientConfig
- Safe preview utilities for response bodies and payloads
- Secret redaction (API keys, service secrets, bearer tokens)
- A structured formatter and a logger adapter that binds call context
  (event type, target service, data type) to every record
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import BrainClientConfig, LogLevel


# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|api[_-]?key|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s,}]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=._-]+)',
    r'(?i)x-brain-(?:key|service-secret)\s*[:=]\s*["\']?([^"\'\s,}]+)',
    r'\bbrn?(?:ain)?_(?:svc_)?[A-Za-z0-9]{16,}\b',  # Hub-issued keys (brain_..., brn_svc_...)
    r'\b[a-f0-9]{32,}\b',  # Long hex strings (could be hashes or keys)
]

# Standard LogRecord attributes that are not copied as structured fields
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded, single-line preview of a value.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, bytes):
        s = value.decode("utf-8", errors="replace")
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview + optional redaction. Use this for anything the hub sent back."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class BrainClientFormatter(logging.Formatter):
    """Formatter producing JSON (or plain text) with structured extra fields.

    Extra fields attached via ``extra={...}`` or BrainClientLoggerAdapter are
    emitted as safe, redacted previews.
    """

    def __init__(
        self,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extras: dict[str, str] = {}
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                extras[key] = safe_log_value(value, redact=self.redact_secrets)
        log_data.update(extras)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
            f": {log_data['message']}",
        ]
        if extras:
            parts.append(" ".join(f"{k}={v}" for k, v in extras.items()))
        if "exception" in log_data:
            parts.append("\n" + log_data["exception"])
        return " ".join(parts)


class BrainClientLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that binds call context to every record.

    Usage:
        logger = get_brain_logger(__name__, event_type="order.completed")
        logger.error("Brain event send failed", extra={"status": 500})
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, {k: v for k, v in context.items() if v is not None})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "BrainClientLoggerAdapter":
        """Return a new adapter with additional context."""
        merged = dict(self.extra)
        merged.update({k: v for k, v in context.items() if v is not None})
        return BrainClientLoggerAdapter(self.logger, **merged)


def log_failure(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    error: Exception,
    level: int = logging.ERROR,
    **context: Any,
) -> None:
    """Log a failed hub operation once, with enough context to diagnose it.

    HTTP failures carry status and a redacted body preview; network and
    timeout failures carry the exception message.
    """
    status = getattr(error, "status_code", None)
    fields = {k: v for k, v in context.items() if v is not None}
    fields["error_code"] = getattr(error, "code", type(error).__name__)
    ctx = " ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if status is not None:
        body = safe_log_value(getattr(error, "body", ""))
        fields.update(status=status, body=body)
        logger.log(level, "%s failed: %s status=%s body=%s", operation, ctx, status, body, extra=fields)
    else:
        fields["error"] = str(error)
        logger.log(level, "%s failed: %s error=%s", operation, ctx, error, extra=fields)


def setup_logging(
    config: Optional[BrainClientConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
    logger_name: str = "brainclient",
) -> None:
    """Configure the ``brainclient`` logger hierarchy.

    Only the client's own logger is touched; the host application's root
    logger and handlers are left alone.

    Args:
        config: BrainClientConfig instance (if None, loads from environment)
        json_format: Override config.log_json
        redact_secrets: Whether to redact secrets (default: True)
        logger_name: Logger to configure (default: "brainclient")
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Remove handlers installed by a previous call to avoid duplicates
    for handler in logger.handlers[:]:
        if getattr(handler, "_brainclient_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        BrainClientFormatter(
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    handler._brainclient_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)


def get_brain_logger(name: str, **context: Any) -> BrainClientLoggerAdapter:
    """Get a logger adapter with bound call context.

    Args:
        name: Logger name (typically __name__)
        **context: Fields added to every record (None values are dropped)

    Example:
        logger = get_brain_logger(__name__, target="domain-monitor")
        logger.warning("Brain proxy request failed", extra={"status": 502})
    """
    return BrainClientLoggerAdapter(logging.getLogger(name), **context)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "BrainClientFormatter",
    "BrainClientLoggerAdapter",
    "log_failure",
    "setup_logging",
    "get_brain_logger",
]
