"""
HTTP client that fetches HTML pages for the crawler.
"""

import threading
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from search_engine.utils.logging import get_logger
from search_engine.utils.errors import FetchError


logger = get_logger(__name__)

REDIRECT_STATUSES = (301, 302, 303, 307, 308)


class FetchedPage(NamedTuple):
    """HTML body and the URL it was served from after redirects."""
    url: str
    html: str


@dataclass
class FetchConfig:
    """Fetcher configuration."""
    redirect_limit: int = 3
    timeout: float = 10.0
    retry_attempts: int = 2
    backoff_factor: float = 0.5
    retry_on_status: List[int] = field(default_factory=lambda: [500, 502, 503, 504])
    user_agent: str = "search-engine-crawler/1.0"


class HtmlFetcher:
    """
    Fetches HTML over HTTP(S), following a bounded number of redirects.
    
    Each thread gets its own requests session.
    """
    
    def __init__(self, config: Optional[FetchConfig] = None):
        """
        Initialize the fetcher.
        
        Args:
            config: Fetch configuration
        """
        self.config = config or FetchConfig()
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()
    
    def _create_session(self) -> requests.Session:
        """Create requests session with retry configuration."""
        session = requests.Session()
        
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            backoff_factor=self.config.backoff_factor,
            status_forcelist=self.config.retry_on_status,
            allowed_methods=["HEAD", "GET"],
            redirect=False,
            raise_on_status=False
        )
        
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,application/xhtml+xml;q=0.9,*/*;q=0.1'
        })
        
        return session
    
    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = self._create_session()
            with self._sessions_lock:
                self._sessions.append(session)
        return session
    
    def fetch(self, url: str, redirects: Optional[int] = None) -> Optional[str]:
        """
        Fetch a page's HTML.
        
        Args:
            url: Absolute http(s) URL
            redirects: Redirects left to follow (defaults to the configured limit)
            
        Returns:
            The HTML body of a 200 text/html response, or None on any failure
        """
        page = self.fetch_page(url, redirects)
        return page.html if page else None
    
    def fetch_page(self, url: str, redirects: Optional[int] = None) -> Optional[FetchedPage]:
        """
        Fetch a page, keeping the URL it was finally served from.
        
        Returns:
            The page, or None on any failure
        """
        if redirects is None:
            redirects = self.config.redirect_limit
        
        try:
            return self.fetch_or_raise(url, redirects)
        except FetchError as e:
            logger.debug(f"Fetch failed for {url}: {e.message} {e.details}")
            return None
    
    def fetch_or_raise(self, url: str, redirects: int) -> FetchedPage:
        """
        Fetch a page, raising on failure.
        
        Raises:
            FetchError: If the URL is not http(s), the request fails, the
                response is not HTML, or the final status is not 200
        """
        if urlparse(url).scheme.lower() not in ("http", "https"):
            raise FetchError("Disallowed protocol", {"url": url})
        
        try:
            response = self._session().get(url, allow_redirects=False, timeout=self.config.timeout)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise FetchError(f"Request failed: {e}", {"url": url})
        
        try:
            if response.status_code in REDIRECT_STATUSES and response.headers.get("Location"):
                if redirects <= 0:
                    raise FetchError("Too many redirects", {"url": url})
                target = urljoin(url, response.headers["Location"])
                logger.debug(f"Following redirect {url} -> {target}")
                return self.fetch_or_raise(target, redirects - 1)
            
            content_type = response.headers.get("Content-Type", "")
            if not content_type.lower().startswith("text/html"):
                raise FetchError("Not an HTML page", {"url": url, "content_type": content_type})
            
            if response.status_code != 200:
                raise FetchError("Unexpected status", {"url": url, "status": response.status_code})
            
            return FetchedPage(url, response.text)
        finally:
            response.close()
    
    def close(self) -> None:
        """Close every session opened by this fetcher."""
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
