"""
Extracts absolute http(s) links from anchor tags.
"""

import warnings
from typing import List
from urllib.parse import urljoin, urldefrag, urlparse

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from requests.utils import requote_uri


ALLOWED_SCHEMES = ("http", "https")


def normalize(url: str) -> str:
    """
    Remove the fragment and percent-encode unsafe characters.
    
    Args:
        url: Absolute URL
        
    Returns:
        Normalized URL
    """
    without_fragment, _ = urldefrag(url.strip())
    return requote_uri(without_fragment)


def is_http(url: str) -> bool:
    return urlparse(url).scheme.lower() in ALLOWED_SCHEMES


def get_valid_links(base_url: str, html: str) -> List[str]:
    """
    Collect every anchor link in document order as an absolute URL.
    
    Relative links are resolved against the base URL. Links that do not
    resolve to http or https (javascript:, mailto:, ...) are dropped.
    Duplicates are kept.
    
    Args:
        base_url: URL the HTML was fetched from
        html: HTML to scan
        
    Returns:
        Normalized absolute URLs
    """
    warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
    soup = BeautifulSoup(html or "", "html.parser")
    
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        
        try:
            absolute = normalize(urljoin(base_url, href))
        except ValueError:
            continue
        
        if is_http(absolute):
            links.append(absolute)
    
    return links
