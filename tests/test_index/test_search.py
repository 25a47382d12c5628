"""Tests for the fuzzy search index."""

import pytest
from conftest import make_document

from markdown_brain.errors import InvalidArgumentError
from markdown_brain.index.search import SearchIndex, SearchIndexHandle


@pytest.fixture
def documents():
    return [
        make_document("groceries.md", "milk eggs bread and some kubernetes cables", title="Grocery list"),
        make_document("k8s.md", "how to deploy on kubernetes clusters", title="Kubernetes"),
        make_document("tagged.md", "nothing of note", title="Misc", tags=["kubernetes"]),
        make_document("cooking.md", "pasta recipes", title="Cooking"),
    ]


class TestSearch:
    def test_empty_index_returns_empty_list(self):
        index = SearchIndex.build([])
        assert index.search("anything", 5) == []

    def test_title_match_ranks_first(self, documents):
        index = SearchIndex.build(documents)
        hits = index.search("kubernetes", 5)

        assert hits[0].document.id == "k8s.md"
        assert "title" in hits[0].matched_fields
        assert "content" in hits[0].matched_fields

    def test_results_ascend_by_score(self, documents):
        hits = SearchIndex.build(documents).search("kubernetes", 5)
        scores = [hit.score for hit in hits]
        assert scores == sorted(scores)

    def test_tolerates_typos(self, documents):
        hits = SearchIndex.build(documents).search("kubernets", 5)
        assert "k8s.md" in [hit.document.id for hit in hits]

    def test_matches_tags(self, documents):
        hits = SearchIndex.build(documents).search("kubernetes", 5)
        tagged = next(hit for hit in hits if hit.document.id == "tagged.md")
        assert "tags" in tagged.matched_fields

    def test_unrelated_query_has_no_hits(self, documents):
        assert SearchIndex.build(documents).search("xyzzy", 5) == []

    def test_case_insensitive(self, documents):
        hits = SearchIndex.build(documents).search("KUBERNETES", 5)
        assert hits[0].document.id == "k8s.md"

    def test_limit_bounds_results(self, documents):
        hits = SearchIndex.build(documents).search("kubernetes", 1)
        assert len(hits) == 1

    def test_ties_keep_input_order(self):
        docs = [
            make_document("b.md", "same words here", title="Same"),
            make_document("a.md", "same words here", title="Same"),
        ]
        hits = SearchIndex.build(docs).search("same", 5)
        assert [hit.document.id for hit in hits] == ["b.md", "a.md"]

    def test_scores_within_unit_range(self, documents):
        for hit in SearchIndex.build(documents).search("kubernetes", 5):
            assert 0.0 <= hit.score <= 1.0

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_rejected(self, documents, limit):
        with pytest.raises(InvalidArgumentError, match="limit"):
            SearchIndex.build(documents).search("kubernetes", limit)

    def test_blank_query_rejected(self, documents):
        with pytest.raises(InvalidArgumentError, match="query"):
            SearchIndex.build(documents).search("   ", 5)

    def test_short_title_inside_query_is_not_a_match(self):
        docs = [
            make_document("a.md", "alpha beta", title="First Note"),
            make_document("projects/b.md", "beta gamma"),
            make_document("busy.md", "revision number 9"),
        ]
        hits = SearchIndex.build(docs).search("revision number 9", 5)

        assert [hit.document.id for hit in hits] == ["busy.md"]
        assert hits[0].matched_fields == ("content",)

    def test_short_title_compared_whole(self):
        docs = [make_document("beta.md", "unrelated text", title="Beta")]
        hits = SearchIndex.build(docs).search("zzzz qqqq beta", 5)
        assert all("title" not in hit.matched_fields for hit in hits)


class TestBuild:
    def test_invalid_threshold(self):
        with pytest.raises(ValueError, match="Threshold"):
            SearchIndex.build([], threshold=0)
        with pytest.raises(ValueError, match="Threshold"):
            SearchIndex.build([], threshold=1.5)

    def test_stricter_threshold_drops_weak_matches(self):
        docs = [make_document("a.md", "kubernetes", title="Kubernetes")]
        assert SearchIndex.build(docs, threshold=0.01).search("kubernets", 5) == []
        assert len(SearchIndex.build(docs, threshold=0.4).search("kubernets", 5)) == 1

    def test_len(self, documents):
        assert len(SearchIndex.build(documents)) == 4


class TestSearchIndexHandle:
    def test_not_ready_until_first_swap(self):
        handle = SearchIndexHandle()
        assert handle.current is None
        assert handle.generation == 0

    def test_swap_replaces_index(self, documents):
        handle = SearchIndexHandle()
        first = SearchIndex.build([])
        second = SearchIndex.build(documents)

        handle.swap(first)
        held = handle.current
        handle.swap(second)

        assert handle.current is second
        assert handle.generation == 2
        # A reader holding the old index keeps a complete view
        assert len(held) == 0
