"""
Concurrency primitives used by the index builders and the crawler.

Main Components:
- ReaderWriterLock: many readers or one (reentrant) writer
- WorkerPool: fixed-size pool of worker threads with completion tracking
- ThreadSafeCounter: shared task counter
"""

from .models import ConcurrentConfig, WorkerState, DEFAULT_THREADS
from .thread_safe import ThreadSafeCounter
from .rw_lock import ReaderWriterLock
from .thread_pool import WorkerPool, WorkerThread

__all__ = [
    'ConcurrentConfig',
    'WorkerState',
    'DEFAULT_THREADS',
    'ThreadSafeCounter',
    'ReaderWriterLock',
    'WorkerPool',
    'WorkerThread'
]
