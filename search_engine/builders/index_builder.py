"""
Builds an index from a text file or a directory tree of text files.
"""

from pathlib import Path
from typing import Union

from search_engine.concurrent.thread_pool import WorkerPool
from search_engine.index.base import Index
from search_engine.index.inverted_index import InvertedIndex
from search_engine.text.stemmer import list_stems_from_file, is_text_file
from search_engine.utils.errors import IndexingError, handle_error
from search_engine.utils.logging import get_logger


logger = get_logger(__name__)


def read_file(path: Path, index: Index) -> None:
    """
    Stem a text file and add it to an index as one location.
    
    Args:
        path: File to read
        index: Index to add the file's stems to
        
    Raises:
        IndexingError: If the file cannot be read or decoded
    """
    try:
        stems = list_stems_from_file(path)
    except (OSError, UnicodeDecodeError) as e:
        raise IndexingError(f"Unable to read file: {path}", {"path": str(path), "reason": str(e)})
    
    index.add_all(stems, str(path))


class IndexBuilder:
    """Single-threaded index builder."""
    
    def __init__(self, index: Index):
        """
        Initialize the builder.
        
        Args:
            index: Index to populate
        """
        self.index = index
        self.files_seen = 0
    
    def build(self, path: Union[str, Path]) -> None:
        """
        Populate the index from a file or a directory.
        
        A file given directly is read whatever its extension; inside
        directories only .txt and .text files are read.
        
        Args:
            path: File or directory
            
        Raises:
            IndexingError: If the path does not exist
        """
        path = Path(path)
        if not path.exists():
            raise IndexingError(f"Path does not exist: {path}", {"path": str(path)})
        logger.info(f"Building index from {path}")
        
        if path.is_dir():
            self.read_files(path)
        else:
            self.process_file(path)
    
    def read_files(self, directory: Path) -> None:
        """
        Recursively process every text file below a directory.
        
        A directory that cannot be listed is reported and skipped.
        """
        try:
            children = sorted(directory.iterdir())
        except OSError as e:
            handle_error(
                IndexingError(f"Unable to list directory: {directory}", {"path": str(directory), "reason": str(e)}),
                logger,
                reraise=False
            )
            return
        
        for child in children:
            if child.is_dir():
                self.read_files(child)
            elif is_text_file(child):
                self.process_file(child)
    
    def process_file(self, path: Path) -> None:
        """
        Index one file, reporting (not raising) a failure to read it.
        
        Args:
            path: File to index
        """
        self.files_seen += 1
        try:
            read_file(path, self.index)
        except IndexingError as e:
            handle_error(e, logger, reraise=False)


class ConcurrentIndexBuilder(IndexBuilder):
    """
    Index builder that parses each file in a worker task.
    
    Every task builds a private InvertedIndex for its file and merges it into
    the shared index once, so the shared write lock is taken once per file.
    """
    
    def __init__(self, index: Index, pool: WorkerPool):
        """
        Initialize the builder.
        
        Args:
            index: Shared index; should be safe for concurrent use
            pool: Worker pool to run parse tasks on
        """
        super().__init__(index)
        self.pool = pool
    
    def build(self, path: Union[str, Path]) -> None:
        """Queue one parse task per file and wait for all of them to finish."""
        try:
            super().build(path)
            logger.info(f"Queued {self.files_seen} files for indexing")
        finally:
            self.pool.await_completion()
        logger.info(f"Finished indexing {self.files_seen} files")
    
    def process_file(self, path: Path) -> None:
        self.files_seen += 1
        self.pool.submit(lambda: self._parse_task(path))
    
    def _parse_task(self, path: Path) -> None:
        fragment = InvertedIndex()
        try:
            read_file(path, fragment)
        except IndexingError as e:
            handle_error(e, logger, reraise=False)
            return
        
        self.index.merge(fragment)
        logger.debug(f"Merged {fragment.stem_count()} stems from {path}")
