"""Tests for token-set similarity."""

from conftest import make_document

from markdown_brain.index.similarity import find_similar, jaccard, similarity


class TestJaccard:
    def test_one_shared_token_of_three(self):
        assert jaccard({"alpha", "beta"}, {"alpha", "gamma"}) == 1 / 3

    def test_identical_sets(self):
        assert jaccard({"a", "b"}, {"a", "b"}) == 1.0

    def test_disjoint_sets(self):
        assert jaccard({"a"}, {"b"}) == 0.0

    def test_empty_set_is_zero(self):
        assert jaccard(set(), {"a"}) == 0.0
        assert jaccard({"a"}, set()) == 0.0
        assert jaccard(set(), set()) == 0.0


class TestSimilarity:
    def test_self_similarity_is_one(self):
        doc = make_document("a.md", "some words in a document")
        assert similarity(doc, doc) == 1.0

    def test_symmetric(self):
        a = make_document("a.md", "alpha beta delta")
        b = make_document("b.md", "alpha gamma")
        assert similarity(a, b) == similarity(b, a)

    def test_uses_token_sets(self):
        a = make_document("a.md", "alpha beta")
        b = make_document("b.md", "Alpha, gamma!")
        assert similarity(a, b) == 1 / 3


class TestFindSimilar:
    def test_excludes_target_and_ranks_descending(self):
        docs = [
            make_document("target.md", "alpha beta gamma"),
            make_document("far.md", "delta epsilon"),
            make_document("near.md", "alpha beta gamma delta"),
            make_document("mid.md", "alpha zeta"),
        ]
        hits = find_similar(docs, "target.md", 10)

        ids = [hit.document.id for hit in hits]
        assert "target.md" not in ids
        assert ids == ["near.md", "mid.md", "far.md"]
        assert hits[0].score == 0.75

    def test_respects_limit(self):
        docs = [make_document(f"{i}.md", "alpha") for i in range(5)]
        assert len(find_similar(docs, "0.md", 2)) == 2

    def test_ties_keep_input_order(self):
        docs = [
            make_document("target.md", "alpha"),
            make_document("c.md", "beta"),
            make_document("a.md", "gamma"),
        ]
        hits = find_similar(docs, "target.md", 5)
        assert [hit.document.id for hit in hits] == ["c.md", "a.md"]

    def test_missing_target_returns_none(self):
        docs = [make_document("a.md", "alpha")]
        assert find_similar(docs, "missing.md", 3) is None

    def test_only_document_returns_empty(self):
        docs = [make_document("a.md", "alpha")]
        assert find_similar(docs, "a.md", 3) == []
