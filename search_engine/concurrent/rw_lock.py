"""
Reader-writer lock guarding the shared inverted index.

Many readers may hold the lock at once, or a single writer. The active
writer may re-acquire the write lock and may also take the read lock while
it holds the write lock, so index mutators can call each other from inside
a write section.
"""

import threading
from typing import Optional

from search_engine.utils.logging import get_logger
from search_engine.utils.errors import LockStateError, ConcurrentAccessError


logger = get_logger(__name__)


class _LockHandle:
    """One side (read or write) of a ReaderWriterLock."""
    
    def __init__(self, owner: "ReaderWriterLock"):
        self._owner = owner
    
    def acquire(self) -> None:
        raise NotImplementedError
    
    def release(self) -> None:
        raise NotImplementedError
    
    def __enter__(self):
        self.acquire()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class _ReadLock(_LockHandle):
    
    def acquire(self) -> None:
        self._owner.acquire_read()
    
    def release(self) -> None:
        self._owner.release_read()


class _WriteLock(_LockHandle):
    
    def acquire(self) -> None:
        self._owner.acquire_write()
    
    def release(self) -> None:
        self._owner.release_write()


class ReaderWriterLock:
    """
    Reentrant-for-writers reader/writer lock built on a single monitor.
    
    All state (reader count, writer count and the identity of the active
    writer) is guarded by one condition variable; waiters are woken when the
    last reader or the last writer hold is released.
    """
    
    def __init__(self):
        """Initialize an unlocked reader-writer lock."""
        self._monitor = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers = 0
        self._active_writer: Optional[int] = None
        
        self._read_lock = _ReadLock(self)
        self._write_lock = _WriteLock(self)
    
    def read_lock(self) -> _LockHandle:
        """
        Get the read side of this lock.
        
        Returns:
            Lock handle usable as a context manager
        """
        return self._read_lock
    
    def write_lock(self) -> _LockHandle:
        """
        Get the write side of this lock.
        
        Returns:
            Lock handle usable as a context manager
        """
        return self._write_lock
    
    def readers(self) -> int:
        """Number of read holds currently active."""
        with self._monitor:
            return self._readers
    
    def writers(self) -> int:
        """Number of write holds currently active (re-entries included)."""
        with self._monitor:
            return self._writers
    
    def is_active_writer(self) -> bool:
        """
        Check whether the calling thread holds the write lock.
        
        Returns:
            True if the current thread is the active writer
        """
        with self._monitor:
            return self._is_caller_writer()
    
    def _is_caller_writer(self) -> bool:
        # Callers must hold the monitor.
        return self._active_writer == threading.get_ident()
    
    def acquire_read(self) -> None:
        """Block until no other thread holds the write lock, then add a reader."""
        logger.debug("Acquiring read lock...")
        with self._monitor:
            while self._writers > 0 and not self._is_caller_writer():
                logger.debug("Waiting for read lock...")
                self._monitor.wait()
            
            self._readers += 1
        logger.debug("Acquired read lock.")
    
    def release_read(self) -> None:
        """
        Release one read hold.
        
        Raises:
            LockStateError: If no reader holds the lock
        """
        with self._monitor:
            if self._readers <= 0:
                raise LockStateError(
                    "Unable to release read lock: no readers hold the lock",
                    {"readers": self._readers, "writers": self._writers}
                )
            
            self._readers -= 1
            if self._readers == 0:
                self._monitor.notify_all()
        logger.debug("Released read lock.")
    
    def acquire_write(self) -> None:
        """Block until the lock is free (or already owned by the caller), then add a write hold."""
        logger.debug("Acquiring write lock...")
        with self._monitor:
            caller = threading.get_ident()
            while (self._writers > 0 or self._readers > 0) and self._active_writer != caller:
                logger.debug("Waiting for write lock...")
                self._monitor.wait()
            
            self._active_writer = caller
            self._writers += 1
        logger.debug("Acquired write lock.")
    
    def release_write(self) -> None:
        """
        Release one write hold.
        
        Raises:
            LockStateError: If no writer holds the lock
            ConcurrentAccessError: If the caller is not the active writer
        """
        with self._monitor:
            if self._writers <= 0:
                raise LockStateError(
                    "Unable to release write lock: no writers hold the lock",
                    {"readers": self._readers, "writers": self._writers}
                )
            
            if not self._is_caller_writer():
                raise ConcurrentAccessError(
                    "Write lock released by a thread that is not the active writer",
                    {"active_writer": self._active_writer, "caller": threading.get_ident()}
                )
            
            self._writers -= 1
            if self._writers == 0:
                self._active_writer = None
                self._monitor.notify_all()
        logger.debug("Released write lock.")
    
    def __repr__(self) -> str:
        return f"ReaderWriterLock(readers={self.readers()}, writers={self.writers()})"
