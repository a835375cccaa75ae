"""
Lock-wrapped index safe for use by many worker threads at once.
"""

from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from search_engine.concurrent.rw_lock import ReaderWriterLock
from .base import Index, Posting
from .inverted_index import InvertedIndex, QueryResult


class ConcurrentIndexView(Index):
    """
    Wraps an InvertedIndex so that every mutation runs under the write lock
    and every read (searches included) runs under the read lock.
    """
    
    def __init__(self, index: Optional[InvertedIndex] = None, lock: Optional[ReaderWriterLock] = None):
        """
        Initialize the view.
        
        Args:
            index: Index to protect; a new empty one is created when omitted
            lock: Lock to use; a new one is created when omitted
        """
        self._index = index if index is not None else InvertedIndex()
        self._lock = lock if lock is not None else ReaderWriterLock()
    
    @property
    def lock(self) -> ReaderWriterLock:
        return self._lock
    
    def add(self, term: str, location: str, position: int) -> bool:
        with self._lock.write_lock():
            return self._index.add(term, location, position)
    
    def add_all(self, terms: Sequence[str], location: str) -> None:
        with self._lock.write_lock():
            self._index.add_all(terms, location)
    
    def merge(self, other: Index) -> None:
        """
        Merge a fragment index under a single write section.
        
        The fragment is read before the write lock is taken so that merging
        another lock-wrapped index never holds both locks at once.
        """
        postings = other.iter_postings()
        counts = other.get_word_counts()
        snapshot = _Snapshot(postings, counts)
        
        with self._lock.write_lock():
            self._index.merge(snapshot)
    
    def iter_postings(self) -> List[Posting]:
        with self._lock.read_lock():
            return self._index.iter_postings()
    
    def exact_search(self, query: Iterable[str]) -> List[QueryResult]:
        with self._lock.read_lock():
            return self._index.exact_search(query)
    
    def partial_search(self, query: Iterable[str]) -> List[QueryResult]:
        with self._lock.read_lock():
            return self._index.partial_search(query)
    
    def has_stem(self, term: str) -> bool:
        with self._lock.read_lock():
            return self._index.has_stem(term)
    
    def has_location(self, term: str, location: str) -> bool:
        with self._lock.read_lock():
            return self._index.has_location(term, location)
    
    def has_position(self, term: str, location: str, position: int) -> bool:
        with self._lock.read_lock():
            return self._index.has_position(term, location, position)
    
    def has_word_count(self, location: str) -> bool:
        with self._lock.read_lock():
            return self._index.has_word_count(location)
    
    def get_words(self) -> Tuple[str, ...]:
        with self._lock.read_lock():
            return self._index.get_words()
    
    def get_locations(self, term: str) -> Tuple[str, ...]:
        with self._lock.read_lock():
            return self._index.get_locations(term)
    
    def get_positions(self, term: str, location: str) -> Tuple[int, ...]:
        with self._lock.read_lock():
            return self._index.get_positions(term, location)
    
    def get_word_count(self, location: str) -> int:
        with self._lock.read_lock():
            return self._index.get_word_count(location)
    
    def get_word_counts(self) -> Mapping[str, int]:
        with self._lock.read_lock():
            return self._index.get_word_counts()
    
    def stem_count(self) -> int:
        with self._lock.read_lock():
            return self._index.stem_count()
    
    def location_count(self, term: str) -> int:
        with self._lock.read_lock():
            return self._index.location_count(term)
    
    def position_count(self, term: str, location: str) -> int:
        with self._lock.read_lock():
            return self._index.position_count(term, location)
    
    def to_json_index(self, output: Union[str, Path]) -> None:
        with self._lock.read_lock():
            self._index.to_json_index(output)
    
    def to_json_counts(self, output: Union[str, Path]) -> None:
        with self._lock.read_lock():
            self._index.to_json_counts(output)
    
    def __str__(self) -> str:
        with self._lock.read_lock():
            return str(self._index)
    
    def __repr__(self) -> str:
        with self._lock.read_lock():
            return f"ConcurrentIndexView({self._index!r})"


class _Snapshot:
    """Frozen postings and counts taken from an index before merging."""
    
    def __init__(self, postings: List[Posting], counts: Mapping[str, int]):
        self._postings = postings
        self._counts = counts
    
    def iter_postings(self) -> List[Posting]:
        return self._postings
    
    def get_word_counts(self) -> Mapping[str, int]:
        return self._counts
