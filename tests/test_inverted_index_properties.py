"""
Property-based tests for the inverted index.

**Feature: search-engine, Property 1: Word counts track the largest position**
**Feature: search-engine, Property 2: Merge order does not change the index**
**Feature: search-engine, Property 3: Ranking is a strict total order**
"""

import pytest
from hypothesis import given, strategies as st, settings

from search_engine.index import InvertedIndex, QueryResult, ConcurrentIndexView, IndexFactory


# Hypothesis strategies for generating test data
terms_strategy = st.text(alphabet="abcdef", min_size=1, max_size=6)
locations_strategy = st.sampled_from(["a.txt", "B.txt", "c.txt", "dir/d.txt"])


@st.composite
def document_strategy(draw):
    """Generate a (location, terms) pair."""
    return draw(locations_strategy), draw(st.lists(terms_strategy, min_size=1, max_size=20))


@st.composite
def postings_strategy(draw):
    """Generate (term, location, position) triples."""
    return draw(st.lists(
        st.tuples(terms_strategy, locations_strategy, st.integers(min_value=1, max_value=50)),
        max_size=40
    ))


def build(documents):
    index = InvertedIndex()
    for location, terms in documents:
        index.add_all(terms, location)
    return index


class TestInvertedIndexProperties:
    """Structural invariants of the index."""
    
    @settings(max_examples=50)
    @given(postings=postings_strategy())
    def test_word_count_is_max_position(self, postings):
        index = InvertedIndex()
        for term, location, position in postings:
            index.add(term, location, position)
        
        expected = {}
        for _, location, position in postings:
            expected[location] = max(expected.get(location, 0), position)
        
        assert dict(index.get_word_counts()) == expected
        for term, location, position in postings:
            assert index.has_position(term, location, position)
            assert index.has_location(term, location)
            assert index.has_stem(term)
    
    @settings(max_examples=50)
    @given(postings=postings_strategy())
    def test_add_is_idempotent(self, postings):
        once = InvertedIndex()
        twice = InvertedIndex()
        for term, location, position in postings:
            once.add(term, location, position)
            twice.add(term, location, position)
            assert twice.add(term, location, position) is False
        
        assert once.as_nested_dict() == twice.as_nested_dict()
        assert dict(once.get_word_counts()) == dict(twice.get_word_counts())
    
    @settings(max_examples=50)
    @given(documents=st.lists(document_strategy(), max_size=6))
    def test_merge_is_commutative(self, documents):
        fragments = [build([document]) for document in documents]
        
        forward = InvertedIndex()
        for fragment in fragments:
            forward.merge(fragment)
        
        backward = InvertedIndex()
        for fragment in reversed(fragments):
            backward.merge(fragment)
        
        assert forward.as_nested_dict() == backward.as_nested_dict()
        assert dict(forward.get_word_counts()) == dict(backward.get_word_counts())
    
    @settings(max_examples=50)
    @given(documents=st.lists(document_strategy(), max_size=6))
    def test_merge_matches_direct_build(self, documents):
        distinct = dict(documents)
        direct = build(distinct.items())
        
        merged = InvertedIndex()
        for location, terms in distinct.items():
            merged.merge(build([(location, terms)]))
        
        assert merged.as_nested_dict() == direct.as_nested_dict()
        assert merged.get_words() == direct.get_words()
    
    @settings(max_examples=50)
    @given(documents=st.lists(document_strategy(), min_size=1, max_size=6),
           query=st.lists(st.text(alphabet="abcdef", min_size=1, max_size=3), min_size=1, max_size=3))
    def test_results_are_strictly_ordered(self, documents, query):
        index = build(documents)
        
        for results in (index.partial_search(query), index.exact_search(query)):
            locations = [result.location for result in results]
            assert len(locations) == len(set(locations))
            for first, second in zip(results, results[1:]):
                assert first < second
                assert not second < first
            for result in results:
                assert result.score == pytest.approx(result.match_count / index.get_word_count(result.location))


class TestInvertedIndexSearch:
    """Concrete search scenarios."""
    
    def test_exact_versus_partial(self):
        index = InvertedIndex()
        index.add_all(["comput"], "a.txt")
        index.add_all(["computer"], "b.txt")
        
        exact = index.exact_search(["comput"])
        assert [result.location for result in exact] == ["a.txt"]
        
        partial = index.partial_search(["comput"])
        assert sorted(result.location for result in partial) == ["a.txt", "b.txt"]
    
    def test_ranking_prefers_higher_score(self):
        index = InvertedIndex()
        index.add_all(["comput"] + ["other"] * 9, "A")
        index.add_all(["comput", "comput", "comput", "other", "other"], "B")
        
        results = index.exact_search(["comput"])
        assert [result.location for result in results] == ["B", "A"]
        assert results[0].match_count == 3
        assert results[0].score == pytest.approx(0.6)
        assert results[1].score == pytest.approx(0.1)
    
    def test_ties_break_on_count_then_location(self):
        index = InvertedIndex()
        index.add_all(["x", "y"], "b.txt")
        index.add_all(["x", "x", "y", "y"], "C.txt")
        index.add_all(["x", "y"], "A.txt")
        
        results = index.exact_search(["x"])
        assert [result.location for result in results] == ["C.txt", "A.txt", "b.txt"]
    
    def test_overlapping_prefixes_count_each_term_once(self):
        index = InvertedIndex()
        index.add_all(["computer", "computer", "zzz"], "doc")
        
        results = index.partial_search(["comp", "compute"])
        assert len(results) == 1
        assert results[0].match_count == 2
    
    def test_multiple_terms_accumulate(self):
        index = InvertedIndex()
        index.add_all(["cat", "dog", "cat", "bird"], "doc")
        
        results = index.exact_search(["cat", "dog", "fish"])
        assert len(results) == 1
        assert results[0].match_count == 3
        assert results[0].score == pytest.approx(0.75)
    
    def test_missing_terms_give_no_results(self):
        index = InvertedIndex()
        index.add_all(["cat"], "doc")
        
        assert index.exact_search(["dog"]) == []
        assert index.partial_search(["dog"]) == []
        assert index.search(["dog"], exact=True) == []
    
    def test_accessors_on_missing_keys(self):
        index = InvertedIndex()
        
        assert index.get_locations("nothing") == ()
        assert index.get_positions("nothing", "nowhere") == ()
        assert index.get_word_count("nowhere") == 0
        assert index.location_count("nothing") == 0
        assert index.position_count("nothing", "nowhere") == 0
        assert not index.has_word_count("nowhere")
        assert index.stem_count() == 0
    
    def test_accessors_return_copies(self):
        index = InvertedIndex()
        index.add_all(["b", "a", "b"], "doc")
        
        assert index.get_words() == ("a", "b")
        assert index.get_positions("b", "doc") == (1, 3)
        
        counts = index.get_word_counts()
        with pytest.raises(TypeError):
            counts["doc"] = 99
        assert index.get_word_count("doc") == 3


class TestQueryResult:
    """Score bookkeeping for individual results."""
    
    def test_score_follows_matches(self):
        result = QueryResult("doc", 4)
        assert result.score == 0.0
        
        result.add_matches(1)
        result.add_matches(2)
        assert result.match_count == 3
        assert result.score == pytest.approx(0.75)
    
    def test_zero_word_count_scores_zero(self):
        result = QueryResult("empty", 0, 5)
        assert result.score == 0.0


class TestIndexFactory:
    """Index selection by concurrency mode."""
    
    def test_factory_modes(self):
        assert isinstance(IndexFactory.create_index(), InvertedIndex)
        assert isinstance(IndexFactory.create_index(concurrent=True), ConcurrentIndexView)


class TestConcurrentIndexView:
    """Lock-wrapped index behaviour."""
    
    def test_merge_between_views(self):
        source = ConcurrentIndexView()
        source.add_all(["cat", "dog"], "a")
        target = ConcurrentIndexView()
        target.add_all(["cat"], "b")
        
        target.merge(source)
        
        assert target.get_locations("cat") == ("a", "b")
        assert dict(target.get_word_counts()) == {"a": 2, "b": 1}
        assert source.lock.readers() == 0
        assert target.lock.writers() == 0
    
    def test_mutations_inside_held_write_lock(self):
        view = ConcurrentIndexView()
        
        with view.lock.write_lock():
            view.add("cat", "doc", 1)
            assert view.has_stem("cat")
            assert view.lock.writers() == 1
        
        assert view.lock.writers() == 0
        assert view.get_positions("cat", "doc") == (1,)
    
    def test_wraps_existing_index(self):
        index = InvertedIndex()
        index.add_all(["cat"], "doc")
        view = ConcurrentIndexView(index)
        
        assert view.search(["ca"], exact=False)[0].location == "doc"
        assert str(view) == str(index)
