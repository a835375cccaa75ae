"""
Fixed-size worker pool draining a shared task queue.
"""

import threading
import traceback
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from search_engine.utils.logging import get_logger
from search_engine.utils.errors import WorkerPoolError
from .models import ConcurrentConfig, WorkerState, DEFAULT_THREADS
from .thread_safe import ThreadSafeCounter


logger = get_logger(__name__)

Task = Callable[[], Any]


class WorkerThread(threading.Thread):
    """Long-lived worker that runs tasks taken from its pool's queue."""
    
    def __init__(self, worker_id: str, pool: "WorkerPool"):
        """
        Initialize worker thread.
        
        Args:
            worker_id: Unique identifier for this worker
            pool: Pool owning the task queue
        """
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        
        self.worker_id = worker_id
        self.pool = pool
        self.state = WorkerState.STARTING
        self.tasks_completed = 0
        self.tasks_failed = 0
        self.logger = get_logger(f"{__name__}.{worker_id}")
    
    def run(self) -> None:
        """Main worker loop: wait for work, run it outside the pool monitor, repeat."""
        self.logger.debug(f"Worker {self.worker_id} starting")
        
        while True:
            self.state = WorkerState.IDLE
            task = self.pool._next_task()
            if task is None:
                break
            
            self.state = WorkerState.WORKING
            try:
                task()
                self.tasks_completed += 1
            except Exception as e:
                self.tasks_failed += 1
                self.logger.warning(f"Worker {self.worker_id} task failed: {e}")
                self.logger.debug(f"Worker {self.worker_id} traceback: {traceback.format_exc()}")
            finally:
                self.pool._task_finished()
        
        self.state = WorkerState.STOPPED
        self.logger.debug(f"Worker {self.worker_id} terminating")


class WorkerPool:
    """
    Fixed set of worker threads sharing one task queue and one pending count.
    
    A task counts as pending from the moment it is submitted until it has
    finished running, so tasks that submit further tasks keep the pool busy
    until their children are done as well.
    """
    
    def __init__(self, threads: int = DEFAULT_THREADS, config: Optional[ConcurrentConfig] = None):
        """
        Initialize the pool and start its workers.
        
        Args:
            threads: Number of worker threads (ignored when config is given)
            config: Optional pool configuration
            
        Raises:
            WorkerPoolError: If the thread count is invalid
        """
        if config is None:
            if threads < 1:
                raise WorkerPoolError("Worker pool needs at least one thread", {"threads": threads})
            config = ConcurrentConfig(max_workers=threads)
        self.config = config
        
        # One lock, two wait sets: idle workers and callers awaiting completion.
        self._lock = threading.Lock()
        self._has_work = threading.Condition(self._lock)
        self._all_done = threading.Condition(self._lock)
        
        self._tasks: Deque[Task] = deque()
        self._pending = 0
        self._shutdown = False
        
        self._submitted = ThreadSafeCounter()
        
        self._workers: List[WorkerThread] = [
            WorkerThread(str(i), self) for i in range(config.max_workers)
        ]
        for worker in self._workers:
            worker.start()
        
        logger.debug(f"Worker pool initialized with {len(self._workers)} worker threads")
    
    def submit(self, task: Task) -> None:
        """
        Queue a task for execution by the next free worker.
        
        Args:
            task: Zero-argument callable
            
        Raises:
            WorkerPoolError: If the pool has been shut down
        """
        with self._lock:
            if self._shutdown:
                raise WorkerPoolError("Cannot submit tasks to a pool that has been shut down")
            
            self._tasks.append(task)
            self._pending += 1
            self._submitted.increment()
            self._has_work.notify()
    
    def _next_task(self) -> Optional[Task]:
        """Block until a task is available; None tells the worker to exit."""
        with self._lock:
            while not self._tasks and not self._shutdown:
                self._has_work.wait()
            
            if self._shutdown:
                return None
            
            return self._tasks.popleft()
    
    def _task_finished(self) -> None:
        with self._lock:
            self._pending -= 1
            if self._pending == 0:
                self._all_done.notify_all()
    
    def await_completion(self) -> None:
        """
        Block until every submitted task has finished.
        
        Workers keep running afterwards, so the pool can be reused.
        
        Raises:
            WorkerPoolError: If called from one of this pool's own workers
        """
        if threading.current_thread() in self._workers:
            raise WorkerPoolError("A worker cannot wait for its own pool to drain")
        
        with self._lock:
            while self._pending > 0:
                self._all_done.wait()
        
        logger.debug("Worker pool drained")
    
    def shutdown(self) -> None:
        """
        Ask all workers to exit once their current task is done.
        
        Tasks still queued at this point are skipped.
        """
        logger.debug("Worker pool triggering shutdown...")
        with self._lock:
            self._shutdown = True
            skipped = len(self._tasks)
            self._tasks.clear()
            self._pending -= skipped
            self._has_work.notify_all()
            if self._pending == 0:
                self._all_done.notify_all()
        
        if skipped:
            logger.warning(f"Worker pool shut down with {skipped} queued tasks not started")
    
    def join_all(self) -> None:
        """
        Wait for pending work, shut down, and wait for every worker to exit.
        
        The pool cannot be used after this call.
        """
        try:
            self.await_completion()
            self.shutdown()
            
            for worker in self._workers:
                worker.join(timeout=self.config.join_timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} did not terminate within {self.config.join_timeout}s")
            
            logger.debug("All worker threads terminated")
        except KeyboardInterrupt:
            logger.warning("Worker pool interrupted while joining")
            self.shutdown()
            raise
    
    def size(self) -> int:
        """Number of worker threads."""
        return len(self._workers)
    
    def remaining(self) -> int:
        """Number of tasks submitted but not yet finished."""
        with self._lock:
            return self._pending
    
    def is_shutdown(self) -> bool:
        with self._lock:
            return self._shutdown
    
    def is_running(self) -> bool:
        """True while any worker thread is alive."""
        return any(worker.is_alive() for worker in self._workers)
    
    def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get worker pool statistics.
        
        Returns:
            Dictionary with pool statistics
        """
        worker_states = {state.value: 0 for state in WorkerState}
        for worker in self._workers:
            worker_states[worker.state.value] += 1
        
        return {
            "total_workers": len(self._workers),
            "alive_workers": sum(1 for w in self._workers if w.is_alive()),
            "worker_states": worker_states,
            "tasks_submitted": self._submitted.get_value(),
            "tasks_completed": sum(w.tasks_completed for w in self._workers),
            "tasks_failed": sum(w.tasks_failed for w in self._workers),
            "tasks_pending": self.remaining(),
            "shutdown": self.is_shutdown()
        }
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.join_all()
