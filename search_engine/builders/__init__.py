"""
Orchestration: building the index, evaluating queries and crawling.
"""

from .index_builder import IndexBuilder, ConcurrentIndexBuilder, read_file
from .query_builder import QueryEngine, ConcurrentQueryEngine
from .web_crawler import CrawlController, CrawlFrontier, CrawlState

__all__ = [
    'IndexBuilder',
    'ConcurrentIndexBuilder',
    'read_file',
    'QueryEngine',
    'ConcurrentQueryEngine',
    'CrawlController',
    'CrawlFrontier',
    'CrawlState'
]
