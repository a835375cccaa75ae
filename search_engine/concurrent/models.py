"""
Data models for the concurrent work framework.
"""

from dataclasses import dataclass
from enum import Enum

from search_engine.utils.errors import WorkerPoolError


DEFAULT_THREADS = 5


class WorkerState(Enum):
    """Worker thread state."""
    STARTING = "starting"
    IDLE = "idle"
    WORKING = "working"
    STOPPED = "stopped"


@dataclass
class ConcurrentConfig:
    """Configuration for the worker pool."""
    max_workers: int = DEFAULT_THREADS
    join_timeout: float = 30.0
    
    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()
    
    def validate(self) -> None:
        """
        Validate configuration parameters.
        
        Raises:
            WorkerPoolError: If configuration is invalid
        """
        errors = []
        
        if not (1 <= self.max_workers <= 256):
            errors.append("max_workers must be between 1 and 256")
        
        if self.join_timeout <= 0:
            errors.append("join_timeout must be positive")
        
        if errors:
            raise WorkerPoolError(
                f"Invalid concurrent configuration: {'; '.join(errors)}",
                {"max_workers": self.max_workers, "join_timeout": self.join_timeout}
            )
    
    @classmethod
    def from_threads(cls, threads: int) -> "ConcurrentConfig":
        """
        Build a configuration from a requested thread count.
        
        Counts below one fall back to the default pool size.
        
        Args:
            threads: Requested number of worker threads
            
        Returns:
            Validated configuration
        """
        return cls(max_workers=threads if threads >= 1 else DEFAULT_THREADS)
