"""
Centralized Logging Configuration

Provides secure, production-ready logging with:
- Configurable log levels
- Automatic log rotation
- Secret masking to prevent credential and PII leaks
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Masks:
    - Passwords and password hashes
    - Tokens, session secrets and Bearer credentials
    - E-mail addresses (login identifiers)
    - Phone numbers
    - Delivery addresses
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # Tokens and secrets
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:.]{16,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(secret["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_SECRET]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),

        # Passwords
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_PASSWORD]\3'),

        # bcrypt hashes
        (re.compile(r'\$2[aby]?\$\d{2}\$[./A-Za-z0-9]{53}'), '[REDACTED_HASH]'),

        # Email addresses (PII)
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),

        # Phone numbers (various formats)
        (re.compile(r'\b(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),

        # Delivery addresses
        (re.compile(r'(address["\']?\s*[:=]\s*["\']?)([^"\']{10,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_ADDRESS]\3'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log record to mask sensitive data.

        Args:
            record: LogRecord to filter

        Returns:
            True (always - we modify but don't block records)
        """
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


SQL_LOGGERS = ('aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm')


def _build_handlers(log_dir: Path, log_level: int, retention_days: int) -> list[logging.Handler]:
    formatter = logging.Formatter(
        fmt='%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    # Rotated at midnight, older files dropped after retention_days
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "shop.log",
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8"
    )
    handlers = [file_handler, logging.StreamHandler()]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
    return handlers


def setup_logging(log_dir: Path | str = "logs") -> None:
    """
    Initialize centralized logging configuration.

    Call this function once at application startup (in run.py).

    - Level from config.LOG_LEVEL, unknown names fall back to INFO
    - Writes to <log_dir>/shop.log and the console
    - Keeps config.LOG_RETENTION_DAYS rotated files
    - Masks secrets and PII when config.LOG_MASK_SECRETS is True
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_level_str = str(getattr(config, "LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    retention_days = getattr(config, "LOG_RETENTION_DAYS", 7)
    mask_secrets = getattr(config, "LOG_MASK_SECRETS", True)

    handlers = _build_handlers(log_dir, log_level, retention_days)
    if mask_secrets:
        masking_filter = SecretMaskingFilter()
        for handler in handlers:
            handler.addFilter(masking_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)

    logging.info(f"Logging initialized: Level={log_level_str}, Retention={retention_days} days, "
                 f"Masking={'ENABLED' if mask_secrets else 'DISABLED'}")


def silence_sql_loggers() -> None:
    """
    Mutes SQLAlchemy/aiosqlite output.

    Must run after the engine is created, SQLAlchemy resets logger levels on engine creation.
    """
    for logger_name in SQL_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.CRITICAL)
        logger.propagate = False
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(logging.NullHandler())
