"""
Property-based tests for single-threaded and concurrent index building.

**Feature: search-engine, Property 8: Concurrent build equals sequential build**
**Feature: search-engine, Property 9: No postings are lost under concurrent merges**
"""

import threading

import pytest
from hypothesis import given, strategies as st, settings

from search_engine.builders import IndexBuilder, ConcurrentIndexBuilder, read_file
from search_engine.concurrent import WorkerPool
from search_engine.index import InvertedIndex, ConcurrentIndexView
from search_engine.utils.errors import IndexingError

from conftest import write_text_files


LETTERS = "bcdfghjklmnpqrstvwxz"


def unique_word(i: int) -> str:
    """A word made only of consonants, which the stemmer leaves unchanged."""
    word = ""
    i += 1
    while i:
        i, digit = divmod(i - 1, len(LETTERS))
        word = LETTERS[digit] + word
    return "q" + word


class TestIndexBuilder:
    """Single-threaded building."""
    
    def test_directory_build(self, text_corpus):
        index = InvertedIndex()
        builder = IndexBuilder(index)
        builder.build(text_corpus["root"])
        
        a, b, c = str(text_corpus["a"]), str(text_corpus["b"]), str(text_corpus["c"])
        
        assert builder.files_seen == 3
        assert dict(index.get_word_counts()) == {a: 1, b: 3, c: 4}
        assert index.get_locations("comput") == tuple(sorted([a, b]))
        assert index.get_positions("comput", b) == (1, 2)
        assert index.get_positions("run", c) == (1, 3)
        assert index.get_positions("dog", c) == (4,)
        assert not index.has_word_count(str(text_corpus["skipped"]))
    
    def test_single_file_ignores_extension(self, text_corpus):
        index = InvertedIndex()
        IndexBuilder(index).build(text_corpus["skipped"])
        
        assert index.get_locations("comput") == (str(text_corpus["skipped"]),)
    
    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(IndexingError):
            IndexBuilder(InvertedIndex()).build(tmp_path / "missing")
    
    def test_unreadable_file_is_skipped(self, tmp_path):
        bad = tmp_path / "bad.txt"
        bad.write_bytes(b"\xff\xfe\xfa not utf-8")
        good = tmp_path / "good.txt"
        good.write_text("cats", encoding="utf-8")
        
        index = InvertedIndex()
        IndexBuilder(index).build(tmp_path)
        
        assert index.get_locations("cat") == (str(good),)
        assert not index.has_word_count(str(bad))
    
    def test_read_file_error(self, tmp_path):
        with pytest.raises(IndexingError):
            read_file(tmp_path / "absent.txt", InvertedIndex())
    
    def test_unlistable_directory_is_skipped(self, locked_corpus):
        index = InvertedIndex()
        builder = IndexBuilder(index)
        builder.build(locked_corpus["root"])
        
        assert index.stem_count() == 2
        assert index.get_locations("cat") == (str(locked_corpus["b"]),)
        assert index.get_locations("tree") == (str(locked_corpus["c"]),)
        assert not index.has_word_count(str(locked_corpus["locked"] / "x.txt"))
        assert builder.files_seen == 2


class TestConcurrentIndexBuilder:
    """Multithreaded building."""
    
    def test_disjoint_vocabularies_lose_nothing(self, make_text_files):
        files, words_per_file = 120, 5
        contents = [
            " ".join(unique_word(f * words_per_file + w) for w in range(words_per_file))
            for f in range(files)
        ]
        directory = make_text_files(contents)
        
        index = ConcurrentIndexView()
        with WorkerPool(6) as pool:
            ConcurrentIndexBuilder(index, pool).build(directory)
        
        assert index.stem_count() == files * words_per_file
        assert len(index.get_word_counts()) == files
        assert all(count == words_per_file for count in index.get_word_counts().values())
    
    def test_concurrent_matches_sequential(self, text_corpus):
        sequential = InvertedIndex()
        IndexBuilder(sequential).build(text_corpus["root"])
        
        concurrent = ConcurrentIndexView()
        with WorkerPool(4) as pool:
            ConcurrentIndexBuilder(concurrent, pool).build(text_corpus["root"])
        
        assert str(concurrent) == str(sequential)
        assert dict(concurrent.get_word_counts()) == dict(sequential.get_word_counts())
    
    @settings(max_examples=5, deadline=None)
    @given(
        contents=st.lists(
            st.lists(st.sampled_from(["cat", "dogs", "running", "computer", "tree"]), min_size=1, max_size=12)
                .map(" ".join),
            min_size=1,
            max_size=30
        ),
        threads=st.integers(min_value=1, max_value=8)
    )
    def test_concurrent_build_is_deterministic(self, tmp_path_factory, contents, threads):
        directory = tmp_path_factory.mktemp("corpus")
        write_text_files(directory, contents)
        
        sequential = InvertedIndex()
        IndexBuilder(sequential).build(directory)
        
        concurrent = ConcurrentIndexView()
        with WorkerPool(threads) as pool:
            ConcurrentIndexBuilder(concurrent, pool).build(directory)
        
        assert sorted(concurrent.iter_postings()) == sorted(sequential.iter_postings())
        assert dict(concurrent.get_word_counts()) == dict(sequential.get_word_counts())
    
    def test_reads_during_build_are_consistent(self, make_text_files):
        directory = make_text_files(["cat dogs tree"] * 80)
        index = ConcurrentIndexView()
        done = threading.Event()
        observed = []
        
        def reader():
            while not done.is_set():
                counts = index.get_word_counts()
                locations = index.get_locations("cat")
                observed.append(all(count == 3 for count in counts.values()))
                observed.append(len(locations) <= 80)
        
        thread = threading.Thread(target=reader)
        thread.start()
        with WorkerPool(4) as pool:
            ConcurrentIndexBuilder(index, pool).build(directory)
        done.set()
        thread.join(timeout=10)
        
        assert all(observed)
        assert index.location_count("cat") == 80
    
    def test_unlistable_directory_is_skipped(self, locked_corpus):
        index = ConcurrentIndexView()
        with WorkerPool(4) as pool:
            ConcurrentIndexBuilder(index, pool).build(locked_corpus["root"])
        
        assert index.stem_count() == 2
        assert dict(index.get_word_counts()) == {str(locked_corpus["b"]): 1, str(locked_corpus["c"]): 1}
