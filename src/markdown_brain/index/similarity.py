"""Token-set (Jaccard) similarity between documents."""

from collections.abc import Iterable, Set

from markdown_brain.index.models import Document, SimilarHit


def jaccard(a: Set[str], b: Set[str]) -> float:
    """Intersection over union of two token sets; 0 if either is empty."""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def similarity(doc_a: Document, doc_b: Document) -> float:
    """Jaccard similarity of two documents' tokens."""
    return jaccard(doc_a.tokens, doc_b.tokens)


def find_similar(documents: Iterable[Document], target_id: str, limit: int) -> list[SimilarHit] | None:
    """
    Rank documents by similarity to the document with ``target_id``.

    Computed over the full candidate set on every call. The target itself is
    never included; equal scores keep the input order.

    Returns:
        At most ``limit`` hits, best first, or None if the target is absent.
    """
    documents = list(documents)
    target = next((doc for doc in documents if doc.id == target_id), None)
    if target is None:
        return None

    hits = [
        SimilarHit(document=doc, score=similarity(target, doc))
        for doc in documents
        if doc.id != target_id
    ]
    hits.sort(key=lambda hit: hit.score, reverse=True)
    return hits[:limit]
