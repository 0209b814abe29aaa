"""
Centralized Logging Configuration

Provides production-ready logging with:
- Configurable log levels
- Automatic log rotation
- Secret masking to prevent credential and PII leaks
- Correlation ids so every line of one webhook delivery can be grepped together
"""

import contextvars
import logging
import logging.handlers
import re
import uuid
from pathlib import Path
from typing import Pattern

import config

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="-")


def new_correlation_id() -> str:
    correlation_id = uuid.uuid4().hex[:12]
    correlation_id_var.set(correlation_id)
    return correlation_id


class CorrelationIdFilter(logging.Filter):
    """Adds `correlation_id` to every record from the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Masks:
    - API tokens and bearer credentials
    - Webhook and session secrets
    - Signatures
    - Email addresses and phone numbers
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # Tokens
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:.]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),

        # Secrets
        (re.compile(r'(secret["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_SECRET]\3'),

        # Signatures (hex HMAC digests)
        (re.compile(r'(signature["\']?\s*[:=]\s*["\']?)([A-Fa-f0-9]{16,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_SIGNATURE]\3'),

        # Email addresses (PII)
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),

        # Phone numbers
        (re.compile(r'(phone["\']?\s*[:=]\s*["\']?)(\+?[\d\s\-]{7,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_PHONE]\3'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            for pattern, replacement in self.PATTERNS:
                record.msg = pattern.sub(replacement, str(record.msg))

        if record.args:
            masked_args = []
            for arg in record.args:
                if isinstance(arg, str):
                    for pattern, replacement in self.PATTERNS:
                        arg = pattern.sub(replacement, arg)
                masked_args.append(arg)
            record.args = tuple(masked_args)

        return True


def setup_logging(log_dir: Path | str = "logs"):
    """
    Initialize centralized logging configuration.

    Call this function once at application startup (run.py).

    Configuration:
    - Log level from config.LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
    - Automatic rotation every midnight
    - Keeps logs for config.LOG_RETENTION_DAYS days
    - Masks secrets if config.LOG_MASK_SECRETS is True
    - Writes to logs/storefront.log
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True)

    log_level_str = getattr(config, "LOG_LEVEL", "INFO")
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    retention_days = getattr(config, "LOG_RETENTION_DAYS", 7)
    mask_secrets = getattr(config, "LOG_MASK_SECRETS", True)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(name)-25s | %(levelname)-8s | %(correlation_id)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "storefront.log",
        when="midnight",
        interval=1,
        backupCount=retention_days,
        encoding="utf-8"
    )
    console_handler = logging.StreamHandler()

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        handler.addFilter(CorrelationIdFilter())
        if mask_secrets:
            handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # SQL statements would leak order contents at DEBUG
    for noisy in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info("=" * 80)
    logging.info(f"Logging initialized: Level={log_level_str}, Retention={retention_days} days, Masking={'ENABLED' if mask_secrets else 'DISABLED'}")
    logging.info("=" * 80)
