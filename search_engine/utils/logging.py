"""
Logging configuration and utilities.

Log records go to stderr (stdout carries the driver's own report lines) and,
optionally, to a daily rotated file. Stage timings are emitted as structlog
key/value events.
"""

import functools
import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Callable, Optional

import structlog


CONSOLE_FORMAT = '%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(threadName)s] %(levelname)s %(name)s %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    retention_days: int = 7
) -> None:
    """
    Set up console and file logging plus structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at midnight
        retention_days: Number of rotated log files to keep
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_file,
            when='midnight',
            backupCount=retention_days,
            encoding='utf-8'
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Standard library logger
    """
    return logging.getLogger(name)


def get_structured_logger(name: str):
    """Get a structlog logger that writes through the standard handlers."""
    return structlog.get_logger(name)


def log_stage(stage: str) -> Callable:
    """
    Decorator that records how long a driver stage took.

    Emits a ``stage_finished`` event with the stage name, the elapsed
    seconds and the wrapped function's return value, or ``stage_failed``
    if it raised.

    Args:
        stage: Stage name, e.g. "build" or "query"
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            events = get_structured_logger("search_engine.stages")
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                events.error("stage_failed", stage=stage,
                             elapsed=round(time.perf_counter() - start, 6), error=str(e))
                raise
            events.info("stage_finished", stage=stage,
                        elapsed=round(time.perf_counter() - start, 6), result=result)
            return result
        return wrapper
    return decorator
