"""
Logging utilities with credential masking.

This module provides logging setup with:
- Configurable log levels and output destinations
- Log rotation for file handlers
- Masking of session tokens, bearer headers and passwords
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def mask_token(token: Optional[str]) -> str:
    """
    Mask a session token for safe logging.

    Examples:
        >>> mask_token("abcd1234efgh")
        'abcd***'
        >>> mask_token("")
        '***'
    """
    if not token:
        return "***"
    return token[:4] + "***" if len(token) > 8 else "***"


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that masks credentials before output.

    Always lets the record through.
    """

    PATTERNS = [
        (re.compile(r'(bearer)\s+[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE), r'\1 ********'),
        (re.compile(r'(token|password|pwd)["\']?\s*[:=]\s*["\']?([^"\'\s,]+)', re.IGNORECASE),
         r'\1: ********'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = str(record.msg)
        for pattern, replacement in self.PATTERNS:
            message = pattern.sub(replacement, message)
        record.msg = message
        return True


def setup_logger(
    name: str = "tutor_schedule",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Module loggers (``logging.getLogger(__name__)``) under the package
    propagate to the logger configured here.

    Args:
        name: Logger name (default: "tutor_schedule")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger(level=logging.DEBUG, log_file="output/logs/app.log")
        >>> logger.info("Reminder service started")
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(SensitiveDataFilter())
        logger.addHandler(file_handler)

    return logger
