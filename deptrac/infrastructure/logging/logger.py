"""Structured logging setup shared by the whole package."""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

import structlog

from deptrac.config.schemas.logging_schema import LogDestination, LoggingConfig

_configured = False


class DetailedFormatter(logging.Formatter):
    """Formatter that adds caller information to every record."""

    def format(self, record):
        record.caller_info = f"{record.module}.{record.funcName}:{record.lineno}"
        return super().format(record)


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s [%(caller_info)s] - %(message)s"


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Set up structured logging using structlog on top of stdlib logging.

    Args:
        config: Logging configuration. If None, it is read from the environment.
    """
    global _configured

    if config is None:
        config = LoggingConfig.from_environment()

    root_logger = logging.getLogger("deptrac")
    root_logger.setLevel(getattr(logging, config.level))

    handlers: List[logging.Handler] = []

    if config.destination in (LogDestination.FILE, LogDestination.BOTH):
        log_dir = os.path.dirname(os.path.abspath(config.file_path))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        file_handler.setFormatter(DetailedFormatter(LOG_FORMAT))
        handlers.append(file_handler)

    if config.destination in (LogDestination.STDERR, LogDestination.BOTH):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(DetailedFormatter(LOG_FORMAT))
        handlers.append(console_handler)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    for handler in handlers:
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=config.level,
        log_destination=config.destination.value,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger, configuring logging from the environment on first use.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Bound structlog logger
    """
    if not _configured:
        setup_logging()
    return structlog.get_logger(name)
