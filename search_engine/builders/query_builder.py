"""
Evaluates query files against an index and collects ranked results.
"""

import threading
from pathlib import Path
from typing import Dict, List, Mapping, Tuple, Union

from search_engine.concurrent.thread_pool import WorkerPool
from search_engine.index.base import Index
from search_engine.index.inverted_index import QueryResult
from search_engine.text.stemmer import unique_stems, is_text_file
from search_engine.utils import json_writer
from search_engine.utils.errors import IndexingError, handle_error
from search_engine.utils.logging import get_logger


logger = get_logger(__name__)


class QueryEngine:
    """
    Single-threaded query evaluation.
    
    Each query line is stemmed into a sorted set of distinct terms; lines
    that reduce to the same set are searched only once. Results are keyed by
    the terms joined with single spaces.
    """
    
    def __init__(self, index: Index):
        """
        Initialize the engine.
        
        Args:
            index: Index to search
        """
        self.index = index
        self._results: Dict[str, List[QueryResult]] = {}
    
    def build(self, path: Union[str, Path], exact: bool = False) -> None:
        """
        Search every line of a query file, or of every text file in a directory.
        
        Args:
            path: Query file or directory
            exact: True for exact search, False for partial search
            
        Raises:
            IndexingError: If the path does not exist
        """
        path = Path(path)
        if not path.exists():
            raise IndexingError(f"Path does not exist: {path}", {"path": str(path)})
        logger.info(f"Evaluating queries from {path} ({'exact' if exact else 'partial'} search)")
        
        if path.is_dir():
            self.read_query_files(path, exact)
        else:
            self.process_query_file(path, exact)
    
    def read_query_files(self, directory: Path, exact: bool) -> None:
        try:
            children = sorted(directory.iterdir())
        except OSError as e:
            handle_error(
                IndexingError(f"Unable to list directory: {directory}", {"path": str(directory), "reason": str(e)}),
                logger,
                reraise=False
            )
            return
        
        for child in children:
            if child.is_dir():
                self.read_query_files(child, exact)
            elif is_text_file(child):
                self.process_query_file(child, exact)
    
    def process_query_file(self, path: Path, exact: bool) -> None:
        """Search each line of one file, reporting (not raising) read failures."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                for line in f:
                    self.search_line(line, exact)
        except (OSError, UnicodeDecodeError) as e:
            handle_error(
                IndexingError(f"Unable to read query file: {path}", {"path": str(path), "reason": str(e)}),
                logger,
                reraise=False
            )
    
    def search_line(self, line: str, exact: bool) -> None:
        """
        Search one query line unless an identical query was already searched.
        
        Args:
            line: Raw query text
            exact: True for exact search, False for partial search
        """
        self._evaluate(line, exact)
    
    def _evaluate(self, line: str, exact: bool) -> None:
        terms = unique_stems(line)
        if not terms:
            return
        
        joined = " ".join(terms)
        if not self._claim(joined):
            return
        
        self._store(joined, self.index.search(terms, exact))
    
    def _claim(self, joined: str) -> bool:
        """Reserve a query key; False if it was already searched."""
        if joined in self._results:
            return False
        self._results[joined] = []
        return True
    
    def _store(self, joined: str, results: List[QueryResult]) -> None:
        self._results[joined] = results
    
    def get_results(self) -> Mapping[str, List[QueryResult]]:
        """
        Results for every query, keyed by joined query terms in sorted order.
        
        Returns:
            New dict; the result lists are copies
        """
        return {query: list(results) for query, results in sorted(self._results.items())}
    
    def get_queries(self) -> Tuple[str, ...]:
        """Joined query strings that have been searched, sorted."""
        return tuple(sorted(self._results))
    
    def result_count(self, query: str) -> int:
        """Number of results for a joined query string; zero if unknown."""
        return len(self._results.get(query, ()))
    
    def write_results(self, output: Union[str, Path]) -> None:
        """
        Write all results as JSON.
        
        Args:
            output: Destination file path
        """
        json_writer.write_results(self.get_results(), output)


class ConcurrentQueryEngine(QueryEngine):
    """
    Query evaluation with one worker task per query line.
    
    The results table has its own lock, separate from the index lock; the
    two are never held together.
    """
    
    def __init__(self, index: Index, pool: WorkerPool):
        """
        Initialize the engine.
        
        Args:
            index: Shared index; should be safe for concurrent use
            pool: Worker pool to run search tasks on
        """
        super().__init__(index)
        self.pool = pool
        self._results_lock = threading.Lock()
    
    def build(self, path: Union[str, Path], exact: bool = False) -> None:
        """Queue one search task per query line and wait for all of them."""
        try:
            super().build(path, exact)
        finally:
            self.pool.await_completion()
        logger.info(f"Finished evaluating {len(self.get_queries())} distinct queries")
    
    def search_line(self, line: str, exact: bool) -> None:
        self.pool.submit(lambda: self._evaluate(line, exact))
    
    def _claim(self, joined: str) -> bool:
        with self._results_lock:
            return super()._claim(joined)
    
    def _store(self, joined: str, results: List[QueryResult]) -> None:
        with self._results_lock:
            super()._store(joined, results)
    
    def get_results(self) -> Mapping[str, List[QueryResult]]:
        with self._results_lock:
            return super().get_results()
    
    def get_queries(self) -> Tuple[str, ...]:
        with self._results_lock:
            return super().get_queries()
    
    def result_count(self, query: str) -> int:
        with self._results_lock:
            return super().result_count(query)
