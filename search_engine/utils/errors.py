"""
Custom exception classes and error handling utilities.
"""

from typing import Optional, Dict, Any


class SearchEngineError(Exception):
    """Base exception for all search engine errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LockStateError(SearchEngineError, RuntimeError):
    """Exception raised when a lock is released without being held."""
    pass


class ConcurrentAccessError(SearchEngineError):
    """Exception raised when a write lock is released by a thread that does not own it."""
    pass


class WorkerPoolError(SearchEngineError):
    """Exception raised for invalid worker pool usage."""
    pass


class IndexingError(SearchEngineError):
    """Exception raised when a document cannot be read into the index."""
    pass


class FetchError(SearchEngineError):
    """Exception raised when a web page cannot be fetched."""
    pass


class ConfigurationError(SearchEngineError):
    """Exception raised for configuration-related issues."""
    pass


def handle_error(
    error: Exception,
    logger,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> None:
    """
    Log an error on one line, then optionally re-raise it.
    
    Search engine errors are expected failures (an unreadable file, a page
    that will not load) and are logged as warnings with their details.
    Anything else is logged as an error with its traceback.
    
    Args:
        error: The exception to report
        logger: Logger to report through
        context: Extra key/value pairs for the log line
        reraise: Whether to raise the error again after logging
    """
    if isinstance(error, SearchEngineError):
        details = {**(context or {}), **error.details}
        summary = ", ".join(f"{key}={value}" for key, value in sorted(details.items()))
        logger.warning(f"{error.message} ({summary})" if summary else error.message)
    else:
        logger.error(f"{type(error).__name__}: {error}", exc_info=error)
    
    if reraise:
        raise error
