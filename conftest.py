"""
Pytest configuration and fixtures for search engine tests.
"""

import pytest
from hypothesis import settings, Verbosity
import logging
import os
from pathlib import Path

# Configure Hypothesis for faster test runs
settings.register_profile("fast", max_examples=10, deadline=None, verbosity=Verbosity.quiet)
settings.register_profile("thorough", max_examples=100, deadline=None, verbosity=Verbosity.normal)

# Use fast profile unless another one is requested
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture
def text_corpus(tmp_path):
    """
    Write a small directory of text files.
    
    Returns a dict with the root directory and the individual file paths.
    """
    root = tmp_path / "corpus"
    nested = root / "nested"
    nested.mkdir(parents=True)
    
    a = root / "a.txt"
    a.write_text("computer\n", encoding="utf-8")
    
    b = root / "b.txt"
    b.write_text("computer computer dogs\n", encoding="utf-8")
    
    c = nested / "c.TEXT"
    c.write_text("Running cats, running dogs!\n", encoding="utf-8")
    
    skipped = root / "notes.md"
    skipped.write_text("computer\n", encoding="utf-8")
    
    return {"root": root, "a": a, "b": b, "c": c, "skipped": skipped}


@pytest.fixture
def query_file(tmp_path):
    """Write a query file with a duplicate line and a blank line."""
    path = tmp_path / "queries.txt"
    path.write_text("computer\nComputers!\n\ndogs cats\ncats dogs\n", encoding="utf-8")
    return path


def write_text_files(directory: Path, contents):
    """Write one numbered .txt file per entry and return their paths."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, content in enumerate(contents):
        path = directory / f"file_{i:04d}.txt"
        path.write_text(content, encoding="utf-8")
        paths.append(path)
    return paths


@pytest.fixture
def make_text_files(tmp_path):
    """Factory fixture: write text files under a fresh directory."""
    def _make(contents, name="generated"):
        directory = tmp_path / name
        write_text_files(directory, contents)
        return directory
    return _make


@pytest.fixture
def deny_listing(monkeypatch):
    """
    Make Path.iterdir raise PermissionError for chosen directories.

    Returns a function that adds a directory to the denied set.
    """
    denied = set()
    original_iterdir = Path.iterdir

    def iterdir(self):
        if self in denied:
            raise PermissionError(13, "Permission denied", str(self))
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)
    return denied.add


@pytest.fixture
def locked_corpus(tmp_path, deny_listing):
    """A corpus whose first subdirectory cannot be listed."""
    root = tmp_path / "locked_corpus"
    locked = root / "a_locked"
    locked.mkdir(parents=True)
    (locked / "x.txt").write_text("hidden\n", encoding="utf-8")

    b = root / "b.txt"
    b.write_text("cats\n", encoding="utf-8")
    c = root / "c.txt"
    c.write_text("trees\n", encoding="utf-8")

    deny_listing(locked)
    return {"root": root, "locked": locked, "b": b, "c": c}


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "property: property-based test")
    config.addinivalue_line("markers", "unit: unit test")
    config.addinivalue_line("markers", "integration: integration test")
    
    # Configure logging for tests
    logging.getLogger("search_engine").setLevel(logging.WARNING)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Mark property-based tests
        if "property" in item.name.lower() or any(
            marker.name == "given" for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.property)
        
        if "integration" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
