"""
Capability contract shared by the unsynchronized and lock-wrapped indexes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Tuple, Union, FrozenSet, TYPE_CHECKING

if TYPE_CHECKING:
    from .inverted_index import QueryResult


Posting = Tuple[str, str, FrozenSet[int]]


class Index(ABC):
    """Term -> location -> positions store with word counts and ranked search."""
    
    @abstractmethod
    def add(self, term: str, location: str, position: int) -> bool: ...
    
    @abstractmethod
    def add_all(self, terms: Sequence[str], location: str) -> None: ...
    
    @abstractmethod
    def merge(self, other: "Index") -> None: ...
    
    @abstractmethod
    def iter_postings(self) -> List[Posting]: ...
    
    @abstractmethod
    def exact_search(self, query: Iterable[str]) -> List["QueryResult"]: ...
    
    @abstractmethod
    def partial_search(self, query: Iterable[str]) -> List["QueryResult"]: ...
    
    def search(self, query: Iterable[str], exact: bool) -> List["QueryResult"]:
        """
        Run an exact or partial search for one set of query terms.
        
        Args:
            query: Deduplicated query terms
            exact: True for exact term matching, False for prefix matching
            
        Returns:
            Ranked results, best first
        """
        return self.exact_search(query) if exact else self.partial_search(query)
    
    @abstractmethod
    def has_stem(self, term: str) -> bool: ...
    
    @abstractmethod
    def has_location(self, term: str, location: str) -> bool: ...
    
    @abstractmethod
    def has_position(self, term: str, location: str, position: int) -> bool: ...
    
    @abstractmethod
    def has_word_count(self, location: str) -> bool: ...
    
    @abstractmethod
    def get_words(self) -> Tuple[str, ...]: ...
    
    @abstractmethod
    def get_locations(self, term: str) -> Tuple[str, ...]: ...
    
    @abstractmethod
    def get_positions(self, term: str, location: str) -> Tuple[int, ...]: ...
    
    @abstractmethod
    def get_word_count(self, location: str) -> int: ...
    
    @abstractmethod
    def get_word_counts(self) -> Mapping[str, int]: ...
    
    @abstractmethod
    def stem_count(self) -> int: ...
    
    @abstractmethod
    def location_count(self, term: str) -> int: ...
    
    @abstractmethod
    def position_count(self, term: str, location: str) -> int: ...
    
    @abstractmethod
    def to_json_index(self, output: Union[str, Path]) -> None: ...
    
    @abstractmethod
    def to_json_counts(self, output: Union[str, Path]) -> None: ...
