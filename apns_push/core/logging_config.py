"""
Structured JSON Logging Configuration

Provides logging configuration with:
- JSON formatted output for machine parsing
- Send ID tracking via contextvars, so every record of one send correlates
- Optional file output with rotation
- Configurable log levels via environment
"""
import logging
import logging.handlers
import os
import contextvars
import re
from datetime import datetime, timezone
from typing import Optional
from pythonjsonlogger.json import JsonFormatter

# Context variable for send ID propagation
send_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'send_id', default=None
)


class SendIdFilter(logging.Filter):
    """
    Logging filter that adds send_id to all log records.

    Concurrent sends run in separate asyncio tasks, each with its own
    context, so records from interleaved sends stay distinguishable.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.send_id = send_id_var.get() or "-"
        return True


class SanitizingFilter(logging.Filter):
    """
    Filter that sanitizes log messages to prevent log injection attacks.

    Device tokens and APNS reason strings come from outside; newlines in
    them must not forge log entries.
    """

    # Patterns that could be used for log injection
    DANGEROUS_PATTERNS = [
        (r'\r\n', ' '),  # CRLF injection
        (r'\n', ' '),    # Newline injection
        (r'\r', ' '),    # Carriage return injection
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            for pattern, replacement in self.DANGEROUS_PATTERNS:
                record.msg = re.sub(pattern, replacement, record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                sanitize_log_value(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class CustomJsonFormatter(JsonFormatter):
    """
    JSON formatter that adds standard fields to all log entries.

    Output format:
    {
        "timestamp": "2025-11-23T10:30:00.000Z",
        "level": "WARNING",
        "message": "APNS rejected notification: BadDeviceToken",
        "module": "client",
        "send_id": "3f2a9c0d41b7",
        "logger": "apns_push.push.client",
        ...extra fields...
    }
    """

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = datetime.now(timezone.utc).isoformat()

        log_record['level'] = record.levelname
        log_record['module'] = record.module
        log_record['logger'] = record.name
        log_record['send_id'] = getattr(record, 'send_id', '-')

        if record.funcName:
            log_record['function'] = record.funcName

        if 'message' not in log_record:
            log_record['message'] = record.getMessage()


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the apns_push package with JSON output.

    Args:
        log_level: Override log level (default from settings.LOG_LEVEL)
        log_file: Also write to this file with rotation (default settings.LOG_FILE)

    Returns:
        The apns_push package logger
    """
    from apns_push.core.config import settings

    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)
    log_file = log_file or settings.LOG_FILE

    json_formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s'
    )

    package_logger = logging.getLogger('apns_push')
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(json_formatter)
    console_handler.addFilter(SendIdFilter())
    console_handler.addFilter(SanitizingFilter())
    package_logger.addHandler(console_handler)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Max 10MB per file, keep 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(json_formatter)
        file_handler.addFilter(SendIdFilter())
        file_handler.addFilter(SanitizingFilter())
        package_logger.addHandler(file_handler)

    # Suppress noisy transport loggers
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('hpack').setLevel(logging.WARNING)

    return package_logger


def set_send_id(send_id: Optional[str]) -> contextvars.Token:
    """
    Set the send ID for the current context.

    Args:
        send_id: Identifier for the current send

    Returns:
        Token that can be used to reset the context
    """
    return send_id_var.set(send_id)


def get_send_id() -> Optional[str]:
    """Get the current send ID from context, or None if not set."""
    return send_id_var.get()


def clear_send_id(token: contextvars.Token) -> None:
    """
    Clear the send ID context using the token from set_send_id.

    Args:
        token: Token returned from set_send_id
    """
    send_id_var.reset(token)


def sanitize_log_value(value: str) -> str:
    """
    Sanitize a value for safe logging, preventing log injection.

    Args:
        value: String value to sanitize

    Returns:
        Sanitized string safe for logging
    """
    if not isinstance(value, str):
        return str(value)

    sanitized = value.replace('\r\n', ' ').replace('\n', ' ').replace('\r', ' ')

    # Limit length to prevent log flooding
    max_length = 10000
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + '...[truncated]'

    return sanitized
