"""
Unsynchronized inverted index: term -> location -> word positions.
"""

import bisect
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple, Union

from search_engine.utils import json_writer
from .base import Index, Posting


class QueryResult:
    """
    Search result for one location under one query.
    
    The match count grows as further query terms are found at the location;
    the score is always match_count / word_count.
    """
    
    __slots__ = ("location", "word_count", "match_count", "score")
    
    def __init__(self, location: str, word_count: int, match_count: int = 0):
        self.location = location
        self.word_count = word_count
        self.match_count = 0
        self.score = 0.0
        if match_count:
            self.add_matches(match_count)
    
    def add_matches(self, count: int) -> None:
        """
        Add occurrences to the match count and recalculate the score.
        
        Args:
            count: Number of additional term occurrences at this location
        """
        self.match_count += count
        self.score = self.match_count / self.word_count if self.word_count else 0.0
    
    def sort_key(self) -> Tuple[float, int, str, str]:
        """Descending score, then descending matches, then location ignoring case."""
        return (-self.score, -self.match_count, self.location.lower(), self.location)
    
    def __lt__(self, other: "QueryResult") -> bool:
        return self.sort_key() < other.sort_key()
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, QueryResult):
            return NotImplemented
        return (self.location, self.word_count, self.match_count) == \
            (other.location, other.word_count, other.match_count)
    
    def __hash__(self) -> int:
        return hash((self.location, self.word_count, self.match_count))
    
    def __repr__(self) -> str:
        return f"QueryResult(count={self.match_count}, score={self.score:.8f}, where={self.location!r})"


class InvertedIndex(Index):
    """
    Stores, for every stemmed term, the locations it appears in and the
    1-based word positions within each location, plus the total word count
    of every location.
    
    Terms are kept in a sorted list alongside the map so prefix searches can
    bisect straight to the first candidate term.
    """
    
    def __init__(self):
        """Initialize an empty index."""
        self._index: Dict[str, Dict[str, Set[int]]] = {}
        self._terms: List[str] = []
        self._word_counts: Dict[str, int] = {}
    
    def add(self, term: str, location: str, position: int) -> bool:
        """
        Record that a term occurs at a position within a location.
        
        Args:
            term: Stemmed term
            location: File path or URL
            position: 1-based word position
            
        Returns:
            True if the position was not already recorded
        """
        locations = self._index.get(term)
        if locations is None:
            locations = self._index[term] = {}
            bisect.insort(self._terms, term)
        
        positions = locations.get(location)
        if positions is None:
            positions = locations[location] = set()
        
        if position > self._word_counts.get(location, 0):
            self._word_counts[location] = position
        
        if position in positions:
            return False
        positions.add(position)
        return True
    
    def add_all(self, terms: Sequence[str], location: str) -> None:
        """
        Add a whole document, numbering its terms 1, 2, 3, ... in order.
        
        Args:
            terms: Stems in document order
            location: File path or URL the stems came from
        """
        for position, term in enumerate(terms, start=1):
            self.add(term, location, position)
    
    def merge(self, other: Index) -> None:
        """
        Absorb every posting and word count of another index.
        
        Positions are unioned and word counts take the larger value, so the
        result does not depend on the order fragments are merged in.
        
        Args:
            other: Index to copy from; it is not modified
        """
        for term, location, positions in other.iter_postings():
            if not positions:
                continue
            
            locations = self._index.get(term)
            if locations is None:
                locations = self._index[term] = {}
                bisect.insort(self._terms, term)
            
            existing = locations.get(location)
            if existing is None:
                locations[location] = set(positions)
            else:
                existing.update(positions)
        
        for location, count in other.get_word_counts().items():
            if count > self._word_counts.get(location, 0):
                self._word_counts[location] = count
    
    def iter_postings(self) -> List[Posting]:
        """
        Snapshot of every (term, location, positions) entry.
        
        Returns:
            List of postings in term order
        """
        return [
            (term, location, frozenset(positions))
            for term in self._terms
            for location, positions in self._index[term].items()
        ]
    
    def exact_search(self, query: Iterable[str]) -> List[QueryResult]:
        """
        Rank locations containing any query term exactly.
        
        Args:
            query: Query terms
            
        Returns:
            Ranked results, best first
        """
        return self._rank({term for term in query if term in self._index})
    
    def partial_search(self, query: Iterable[str]) -> List[QueryResult]:
        """
        Rank locations containing any term that starts with a query term.
        
        Each matching indexed term contributes once, even when several query
        terms are prefixes of it.
        
        Args:
            query: Query terms, used as prefixes
            
        Returns:
            Ranked results, best first
        """
        matched: Set[str] = set()
        for prefix in query:
            i = bisect.bisect_left(self._terms, prefix)
            while i < len(self._terms) and self._terms[i].startswith(prefix):
                matched.add(self._terms[i])
                i += 1
        return self._rank(matched)
    
    def _rank(self, terms: Set[str]) -> List[QueryResult]:
        lookup: Dict[str, QueryResult] = {}
        
        for term in sorted(terms):
            for location, positions in self._index[term].items():
                result = lookup.get(location)
                if result is None:
                    result = lookup[location] = QueryResult(location, self._word_counts.get(location, 0))
                result.add_matches(len(positions))
        
        return sorted(lookup.values())
    
    def has_stem(self, term: str) -> bool:
        return term in self._index
    
    def has_location(self, term: str, location: str) -> bool:
        return location in self._index.get(term, {})
    
    def has_position(self, term: str, location: str, position: int) -> bool:
        return position in self._index.get(term, {}).get(location, ())
    
    def has_word_count(self, location: str) -> bool:
        return location in self._word_counts
    
    def get_words(self) -> Tuple[str, ...]:
        """All indexed terms in sorted order."""
        return tuple(self._terms)
    
    def get_locations(self, term: str) -> Tuple[str, ...]:
        """Sorted locations for a term; empty if the term is not indexed."""
        return tuple(sorted(self._index.get(term, {})))
    
    def get_positions(self, term: str, location: str) -> Tuple[int, ...]:
        """Sorted positions of a term in a location; empty if absent."""
        return tuple(sorted(self._index.get(term, {}).get(location, ())))
    
    def get_word_count(self, location: str) -> int:
        return self._word_counts.get(location, 0)
    
    def get_word_counts(self) -> Mapping[str, int]:
        """Read-only snapshot of the word counts, sorted by location."""
        return MappingProxyType(dict(sorted(self._word_counts.items())))
    
    def stem_count(self) -> int:
        return len(self._index)
    
    def location_count(self, term: str) -> int:
        return len(self._index.get(term, {}))
    
    def position_count(self, term: str, location: str) -> int:
        return len(self._index.get(term, {}).get(location, ()))
    
    def as_nested_dict(self) -> Dict[str, Dict[str, List[int]]]:
        """Sorted plain-dict copy of the whole index, for output."""
        return {
            term: {
                location: sorted(positions)
                for location, positions in sorted(self._index[term].items())
            }
            for term in self._terms
        }
    
    def to_json_index(self, output: Union[str, Path]) -> None:
        """
        Write the index as nested JSON.
        
        Args:
            output: Destination file path
        """
        json_writer.write_index(self.as_nested_dict(), output)
    
    def to_json_counts(self, output: Union[str, Path]) -> None:
        """
        Write the word counts as JSON.
        
        Args:
            output: Destination file path
        """
        json_writer.write_counts(self.get_word_counts(), output)
    
    def __str__(self) -> str:
        return json_writer.nested_object_to_string(self.as_nested_dict())
    
    def __repr__(self) -> str:
        return f"InvertedIndex(stems={self.stem_count()}, locations={len(self._word_counts)})"
