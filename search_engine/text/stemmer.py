"""
Splits text into cleaned words and reduces them to English Snowball stems.
"""

import re
import threading
import unicodedata
from pathlib import Path
from typing import List, Set, Union

from nltk.stem.snowball import SnowballStemmer


TEXT_EXTENSIONS = (".txt", ".text")

_SPLIT = re.compile(r"\s+")

# One stemmer per thread.
_local = threading.local()


def _stemmer() -> SnowballStemmer:
    stemmer = getattr(_local, "stemmer", None)
    if stemmer is None:
        stemmer = _local.stemmer = SnowballStemmer("english")
    return stemmer


def clean(text: str) -> str:
    """
    Lowercase text and strip accents, digits and punctuation.
    
    Args:
        text: Raw text
        
    Returns:
        Text containing only letters and whitespace
    """
    decomposed = unicodedata.normalize("NFD", text)
    letters = "".join(
        ch for ch in decomposed
        if not unicodedata.combining(ch) and (ch.isalpha() or ch.isspace())
    )
    return letters.lower()


def parse(line: str) -> List[str]:
    """
    Split a line of text into cleaned words.
    
    Args:
        line: Raw text
        
    Returns:
        Words in order of appearance
    """
    return [word for word in _SPLIT.split(clean(line)) if word]


def stem(word: str) -> str:
    """Reduce a cleaned word to its English Snowball stem."""
    return _stemmer().stem(word)


def list_stems(text: str) -> List[str]:
    """
    Stem every word of a text, keeping order and duplicates.
    
    Args:
        text: Raw text
        
    Returns:
        Stems in order of appearance
    """
    stemmer = _stemmer()
    return [stemmer.stem(word) for word in parse(text)]


def unique_stems(line: str) -> List[str]:
    """
    Stem a line and return the distinct stems in sorted order.
    
    Args:
        line: Raw text, typically one query line
        
    Returns:
        Sorted distinct stems
    """
    unique: Set[str] = set(list_stems(line))
    return sorted(unique)


def list_stems_from_file(path: Union[str, Path]) -> List[str]:
    """
    Stem every word of a UTF-8 text file in document order.
    
    Args:
        path: File to read
        
    Returns:
        Stems in order of appearance across all lines
        
    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    stems: List[str] = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            stems.extend(list_stems(line))
    return stems


def is_text_file(path: Union[str, Path]) -> bool:
    """True if the path ends with .txt or .text, ignoring case."""
    return str(path).lower().endswith(TEXT_EXTENSIONS)
