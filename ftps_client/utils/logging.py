"""Logging configuration for the FTPS client.

Provides centralized logging with redaction so passwords never reach a
log handler, even if a caller logs a raw command.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "ftps_client"

# Patterns to redact from logs
REDACT_PATTERNS = [
    # FTP PASS command
    (re.compile(r'(\bPASS )\S.*$', re.MULTILINE), r'\1****'),
    # Password in key/value form
    (re.compile(r'(password["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(passwd["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    # FTP URLs with credentials
    (re.compile(r'(ftps?)://[^:/\s]+:[^@\s]+@', re.IGNORECASE), r'\1://[REDACTED]@'),
]


def redact(message: str) -> str:
    """Apply every redaction pattern to a message."""
    for pattern, replacement in REDACT_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class RedactingFormatter(logging.Formatter):
    """Formatter that scrubs credentials from log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, redacting credentials."""
        return redact(super().format(record))


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure client logging with redaction.

    Args:
        level: Logging level (default INFO; DEBUG shows wire traffic)
        log_file: Optional file path for log output
        console: Whether to output to console (default True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = RedactingFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance (the client's root logger by default)."""
    return logging.getLogger(name)
