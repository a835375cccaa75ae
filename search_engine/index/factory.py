"""
Construction-time selection between the plain and the lock-wrapped index.
"""

from search_engine.utils.logging import get_logger
from .base import Index
from .inverted_index import InvertedIndex
from .thread_safe_index import ConcurrentIndexView


logger = get_logger(__name__)


class IndexFactory:
    
    @staticmethod
    def create_index(concurrent: bool = False) -> Index:
        """
        Create an empty index.
        
        Args:
            concurrent: True to get an index safe for use by worker threads
            
        Returns:
            ConcurrentIndexView when concurrent, otherwise InvertedIndex
        """
        if concurrent:
            logger.debug("Created index implementation: ConcurrentIndexView")
            return ConcurrentIndexView()
        
        logger.debug("Created index implementation: InvertedIndex")
        return InvertedIndex()
