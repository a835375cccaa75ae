"""
Shared counters for pool bookkeeping.
"""

import threading


class ThreadSafeCounter:
    """Integer counter safe to update from many worker threads."""
    
    def __init__(self, initial_value: int = 0):
        self._value = initial_value
        self._lock = threading.Lock()
    
    def increment(self, amount: int = 1) -> int:
        """
        Add to the counter.
        
        Args:
            amount: Amount to add (default: 1)
            
        Returns:
            Counter value after the update
        """
        with self._lock:
            self._value += amount
            return self._value
    
    def get_value(self) -> int:
        with self._lock:
            return self._value
    
    def __repr__(self) -> str:
        return f"ThreadSafeCounter(value={self.get_value()})"
