"""
Text tokenizing and stemming.
"""

from .stemmer import (
    clean,
    parse,
    stem,
    list_stems,
    unique_stems,
    list_stems_from_file,
    is_text_file
)

__all__ = [
    'clean',
    'parse',
    'stem',
    'list_stems',
    'unique_stems',
    'list_stems_from_file',
    'is_text_file'
]
