"""
Web collaborators used by the crawler: fetching, cleaning and link extraction.
"""

from .http_client import HtmlFetcher, FetchConfig, FetchedPage
from .html_cleaner import strip_block_elements, strip_html
from .link_parser import get_valid_links, normalize

__all__ = [
    'HtmlFetcher',
    'FetchConfig',
    'FetchedPage',
    'strip_block_elements',
    'strip_html',
    'get_valid_links',
    'normalize'
]
