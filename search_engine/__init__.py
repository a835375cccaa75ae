"""
Search engine: a term-position inverted index built from text files or a
bounded web crawl, with ranked exact and partial search.
"""

__version__ = "1.0.0"
