"""
Bounded concurrent web crawl feeding the shared index.
"""

import threading
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple

from search_engine.concurrent.thread_pool import WorkerPool
from search_engine.crawlers.html_cleaner import strip_block_elements, strip_html
from search_engine.crawlers.http_client import HtmlFetcher
from search_engine.crawlers.link_parser import get_valid_links, is_http, normalize
from search_engine.index.base import Index
from search_engine.index.inverted_index import InvertedIndex
from search_engine.text.stemmer import list_stems
from search_engine.utils.logging import get_logger


logger = get_logger(__name__)


class CrawlState(Enum):
    """Stage of a single page crawl."""
    FETCHING = "fetching"
    STRIPPING = "stripping"
    LINK_EXTRACTION = "link_extraction"
    SCHEDULING = "scheduling"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


def _enter(url: str, state: CrawlState) -> None:
    logger.debug(f"Crawl {url}: {state.value}")


class CrawlFrontier:
    """
    Crawl budget and the set of URLs already scheduled, behind one lock.
    
    A link costs one unit of budget the first time it is seen; links seen
    again are free. Once the budget reaches zero nothing more is admitted.
    """
    
    def __init__(self, seed: str, budget: int):
        self._lock = threading.Lock()
        self._remaining = max(budget, 0)
        self._visited: Set[str] = {seed}
    
    def admit(self, links: Iterable[str]) -> List[str]:
        """
        Take budget for each new link, in order, until it runs out.
        
        Args:
            links: Candidate links in document order
            
        Returns:
            Links that should be crawled
        """
        admitted = []
        with self._lock:
            for link in links:
                if self._remaining <= 0:
                    break
                if link in self._visited:
                    continue
                self._visited.add(link)
                self._remaining -= 1
                admitted.append(link)
        return admitted
    
    def remaining(self) -> int:
        with self._lock:
            return self._remaining
    
    def visited(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._visited))


class CrawlController:
    """
    Crawls from a seed URL on a worker pool.
    
    Each page runs FETCHING -> STRIPPING -> LINK_EXTRACTION -> SCHEDULING ->
    PARSING -> DONE. Pages that cannot be fetched stop at FAILED without
    using budget or producing a parse task. Every fetched page produces
    exactly one parse task, whether or not its links were followed.
    """
    
    def __init__(self, index: Index, pool: WorkerPool, fetcher: Optional[HtmlFetcher] = None):
        """
        Initialize the controller.
        
        Args:
            index: Shared index; should be safe for concurrent use
            pool: Worker pool to run crawl and parse tasks on
            fetcher: Page fetcher (a default HtmlFetcher when omitted)
        """
        self.index = index
        self.pool = pool
        self.fetcher = fetcher or HtmlFetcher()
        self._frontier: Optional[CrawlFrontier] = None
    
    def crawl(self, seed_url: str, max_pages: int = 1) -> None:
        """
        Crawl up to max_pages pages (the seed included) and wait for all
        crawl and parse tasks to finish.
        
        Args:
            seed_url: Absolute http(s) URL to start from
            max_pages: Total number of pages the crawl may visit
            
        Raises:
            ValueError: If the seed is not an absolute http(s) URL
        """
        seed = normalize(seed_url)
        if not is_http(seed):
            raise ValueError(f"Seed URL must be an absolute http(s) URL: {seed_url}")
        self._frontier = CrawlFrontier(seed, max_pages - 1)
        logger.info(f"Crawling from {seed} (max {max_pages} pages)")
        
        self.pool.submit(lambda: self._crawl_task(seed))
        self.pool.await_completion()
        
        logger.info(f"Crawl finished: {len(self._frontier.visited())} pages scheduled")
    
    def _crawl_task(self, url: str) -> None:
        _enter(url, CrawlState.FETCHING)
        fetched = self.fetcher.fetch_page(url)
        if fetched is None:
            _enter(url, CrawlState.FAILED)
            logger.warning(f"Unable to crawl URL: {url}")
            return
        
        _enter(url, CrawlState.STRIPPING)
        content = strip_block_elements(fetched.html)
        
        _enter(url, CrawlState.LINK_EXTRACTION)
        links = get_valid_links(fetched.url, content)
        
        _enter(url, CrawlState.SCHEDULING)
        for link in self._frontier.admit(links):
            self.pool.submit(lambda link=link: self._crawl_task(link))
        
        _enter(url, CrawlState.PARSING)
        text = strip_html(fetched.html)
        self.pool.submit(lambda: self._parse_task(url, text))
        
        _enter(url, CrawlState.DONE)
    
    def _parse_task(self, url: str, text: str) -> None:
        fragment = InvertedIndex()
        fragment.add_all(list_stems(text), url)
        self.index.merge(fragment)
        logger.debug(f"Merged {fragment.stem_count()} stems from {url}")
    
    def get_visited(self) -> Tuple[str, ...]:
        """URLs scheduled during the last crawl, seed included, sorted."""
        return self._frontier.visited() if self._frontier else ()
    
    def remaining_budget(self) -> int:
        """Budget left from the last crawl."""
        return self._frontier.remaining() if self._frontier else 0
