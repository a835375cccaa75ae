"""
Removes markup from fetched HTML.
"""

import warnings

from bs4 import BeautifulSoup, Comment, MarkupResemblesLocatorWarning


BLOCK_ELEMENTS = ("head", "style", "script", "noscript", "iframe", "svg")


def _soup_without_blocks(html: str) -> BeautifulSoup:
    warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
    soup = BeautifulSoup(html or "", "html.parser")
    
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    
    for tag in soup.find_all(BLOCK_ELEMENTS):
        tag.decompose()
    
    return soup


def strip_block_elements(html: str) -> str:
    """
    Remove comments and non-content block elements (head, style, script,
    noscript, iframe, svg) while keeping the remaining markup.
    
    Args:
        html: Raw HTML
        
    Returns:
        HTML without block elements
    """
    return str(_soup_without_blocks(html))


def strip_html(html: str) -> str:
    """
    Reduce HTML to its visible text.
    
    Block elements are dropped, the remaining tags are removed and entities
    are unescaped. Element boundaries become whitespace so adjacent words do
    not run together.
    
    Args:
        html: Raw HTML
        
    Returns:
        Plain text
    """
    return _soup_without_blocks(html).get_text(" ")
