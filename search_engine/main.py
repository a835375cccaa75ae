"""
Command-line driver for the search engine.

Builds an index from text files or a web crawl, evaluates query files
against it and writes the index, word counts and search results as JSON.
"""

import sys
import time
import argparse
from typing import Optional, List

from search_engine.builders.index_builder import IndexBuilder, ConcurrentIndexBuilder
from search_engine.builders.query_builder import QueryEngine, ConcurrentQueryEngine
from search_engine.builders.web_crawler import CrawlController
from search_engine.concurrent.models import ConcurrentConfig
from search_engine.concurrent.thread_pool import WorkerPool
from search_engine.crawlers.http_client import FetchConfig, HtmlFetcher
from search_engine.index.base import Index
from search_engine.index.factory import IndexFactory
from search_engine.utils.errors import ConfigurationError, SearchEngineError, WorkerPoolError
from search_engine.utils.logging import get_logger, get_structured_logger, log_stage, setup_logging
from config import ConfigManager, SystemConfig


logger = get_logger(__name__)


class SearchEngineApp:
    """Wires the index, builders, crawler and worker pool for one run."""
    
    def __init__(self, config: SystemConfig, threads: Optional[int] = None):
        """
        Initialize the application.
        
        Args:
            config: System configuration
            threads: Worker count; None selects the single-threaded path
        """
        self.config = config
        self.pool: Optional[WorkerPool] = None
        
        if threads is not None:
            pool_config = ConcurrentConfig.from_threads(threads)
            self.pool = WorkerPool(pool_config.max_workers, pool_config)
        
        self.index: Index = IndexFactory.create_index(concurrent=self.pool is not None)
        
        if self.pool is not None:
            self.query_engine: QueryEngine = ConcurrentQueryEngine(self.index, self.pool)
        else:
            self.query_engine = QueryEngine(self.index)
    
    @property
    def concurrent(self) -> bool:
        return self.pool is not None
    
    @log_stage("build_text")
    def build_from_text(self, path: str) -> bool:
        """Build the index from a file or directory."""
        if self.pool is not None:
            builder = ConcurrentIndexBuilder(self.index, self.pool)
        else:
            builder = IndexBuilder(self.index)
        
        try:
            builder.build(path)
            return True
        except (OSError, SearchEngineError) as e:
            logger.debug(f"Text build failed: {e}")
            print(f"Unable to build the index from path: {path}")
            return False
    
    @log_stage("crawl")
    def build_from_web(self, seed_url: str, max_pages: int) -> bool:
        """Build the index by crawling from a seed URL."""
        crawler_config = self.config.crawler
        fetch_config = FetchConfig(
            redirect_limit=crawler_config.redirect_limit,
            timeout=crawler_config.request_timeout,
            retry_attempts=crawler_config.retry_attempts,
            user_agent=crawler_config.user_agent
        )
        
        with HtmlFetcher(fetch_config) as fetcher:
            controller = CrawlController(self.index, self.pool, fetcher)
            try:
                controller.crawl(seed_url, max_pages)
                return True
            except (ValueError, SearchEngineError) as e:
                logger.debug(f"Crawl failed: {e}")
                print(f"Unable to crawl from seed URL: {seed_url}")
                return False
    
    @log_stage("query")
    def run_queries(self, path: str, exact: bool) -> bool:
        """Evaluate every query line found at path."""
        try:
            self.query_engine.build(path, exact)
            return True
        except (OSError, SearchEngineError) as e:
            logger.debug(f"Query build failed: {e}")
            print(f"Unable to search the index from path: {path}")
            return False
    
    def write_index(self, path: str) -> bool:
        try:
            self.index.to_json_index(path)
            return True
        except OSError:
            print(f"Unable to write the index to path: {path}")
            return False
    
    def write_counts(self, path: str) -> bool:
        try:
            self.index.to_json_counts(path)
            return True
        except OSError:
            print(f"Unable to write the word counts to path: {path}")
            return False
    
    def write_results(self, path: str) -> bool:
        try:
            self.query_engine.write_results(path)
            return True
        except OSError:
            print(f"Unable to write the search results to path: {path}")
            return False
    
    def stop(self) -> None:
        """Shut down and join the worker pool, if any."""
        if self.pool is not None:
            self.pool.join_all()


def create_cli_parser() -> argparse.ArgumentParser:
    """Create command-line interface parser."""
    parser = argparse.ArgumentParser(
        prog='search-engine',
        description='Search Engine - inverted index builder, crawler and query processor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  %(prog)s -text input/ -index                   # Index a directory, write index.json
  %(prog)s -text input/ -query queries.txt -results -threads 8
  %(prog)s -html https://example.com/ -max 50 -counts
        """
    )
    
    # Build sources
    parser.add_argument(
        '-text',
        type=str,
        metavar='PATH',
        help='Build the index from a text file or directory'
    )
    
    parser.add_argument(
        '-html',
        type=str,
        metavar='URL',
        help='Build the index by crawling from a seed URL (multithreaded)'
    )
    
    parser.add_argument(
        '-max',
        type=int,
        metavar='N',
        help='Total number of pages to crawl, seed included (default: 1)'
    )
    
    parser.add_argument(
        '-threads',
        type=int,
        nargs='?',
        const=-1,
        metavar='N',
        help='Use N worker threads (default: 5)'
    )
    
    # Search options
    parser.add_argument(
        '-query',
        type=str,
        metavar='PATH',
        help='Evaluate query lines from a file or directory'
    )
    
    parser.add_argument(
        '-exact',
        action='store_true',
        help='Use exact search instead of partial search'
    )
    
    # Output options
    parser.add_argument(
        '-index',
        type=str,
        nargs='?',
        const='',
        metavar='PATH',
        help='Write the inverted index (default: index.json)'
    )
    
    parser.add_argument(
        '-counts',
        type=str,
        nargs='?',
        const='',
        metavar='PATH',
        help='Write the word counts (default: counts.json)'
    )
    
    parser.add_argument(
        '-results',
        type=str,
        nargs='?',
        const='',
        metavar='PATH',
        help='Write the search results (default: results.json)'
    )
    
    # Configuration and logging
    parser.add_argument(
        '-config',
        type=str,
        metavar='PATH',
        help='Path to configuration file (default: search_engine.json)'
    )
    
    parser.add_argument(
        '-log-level',
        dest='log_level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override log level from configuration'
    )
    
    return parser


def resolve_threads(args: argparse.Namespace, config: SystemConfig) -> Optional[int]:
    """
    Decide how many workers to use.
    
    Returns None for the single-threaded path. A bare -threads uses the
    configured count; -html always runs multithreaded.
    """
    if args.threads is None:
        return config.concurrency.threads if args.html else None
    
    if args.threads == -1:
        return config.concurrency.threads
    
    return args.threads


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run the driver.
    
    Args:
        argv: Argument list, defaults to sys.argv[1:]
        
    Returns:
        Process exit code
    """
    parser = create_cli_parser()
    args = parser.parse_args(argv)
    
    start = time.perf_counter()
    
    config_manager = ConfigManager(args.config) if args.config else ConfigManager()
    try:
        config = config_manager.load_config()
    except ConfigurationError as e:
        print(f"Unable to load the configuration: {e}")
        config = SystemConfig()
    setup_logging(args.log_level or config.log_level, config.log_file)
    
    threads = resolve_threads(args, config)
    try:
        app = SearchEngineApp(config, threads)
    except WorkerPoolError as e:
        print(f"Unable to start {threads} worker threads: {e}")
        app = SearchEngineApp(config, ConcurrentConfig().max_workers)
    summary = get_structured_logger(__name__)
    
    try:
        if args.html:
            if args.text:
                logger.warning(f"Ignoring -text {args.text}: -html was also given")
            max_pages = args.max if args.max is not None else config.crawler.max_pages
            app.build_from_web(args.html, max_pages)
        elif args.text:
            app.build_from_text(args.text)
        
        if args.query:
            app.run_queries(args.query, args.exact)
        
        if args.index is not None:
            app.write_index(args.index or config.output.index_path)
        
        if args.counts is not None:
            app.write_counts(args.counts or config.output.counts_path)
        
        if args.results is not None:
            app.write_results(args.results or config.output.results_path)
    finally:
        app.stop()
    
    elapsed = time.perf_counter() - start
    summary.info(
        "run_finished",
        concurrent=app.concurrent,
        terms=app.index.stem_count(),
        locations=len(app.index.get_word_counts()),
        queries=len(app.query_engine.get_queries()),
        elapsed=round(elapsed, 6)
    )
    print(f"Elapsed: {elapsed:.6f} seconds")
    return 0


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
