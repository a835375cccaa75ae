"""
Inverted index implementations.
"""

from .base import Index
from .inverted_index import InvertedIndex, QueryResult
from .thread_safe_index import ConcurrentIndexView
from .factory import IndexFactory

__all__ = [
    'Index',
    'InvertedIndex',
    'QueryResult',
    'ConcurrentIndexView',
    'IndexFactory'
]
