"""Fuzzy weighted search over a snapshot of the document store."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from rapidfuzz import fuzz

from markdown_brain.errors import InvalidArgumentError
from markdown_brain.index.models import Document, SearchHit

logger = logging.getLogger(__name__)

# Field weights, normalized at build time
FIELD_WEIGHTS = {
    "title": 0.5,
    "content": 0.3,
    "tags": 0.2,
}

DEFAULT_THRESHOLD = 0.4


@dataclass(frozen=True)
class _Entry:
    document: Document
    title: str
    content: str
    tags: tuple[str, ...]


class SearchIndex:
    """
    Immutable fuzzy index built from a list of documents.

    Each field gets a distance in [0, 1] (0 is a perfect match) from
    rapidfuzz's partial ratio, which tolerates typos and transpositions and
    finds the query anywhere in the field. Fields shorter than the query are
    compared whole with ``fuzz.ratio``. A field matches when its distance
    is within ``threshold``; a document is a hit when any field matches.
    The score is the weighted sum of all field distances.
    """

    def __init__(
        self,
        entries: tuple[_Entry, ...],
        threshold: float,
        weights: dict[str, float],
    ):
        self._entries = entries
        self.threshold = threshold
        self._weights = weights

    @classmethod
    def build(
        cls,
        documents: Iterable[Document],
        threshold: float = DEFAULT_THRESHOLD,
        weights: dict[str, float] | None = None,
    ) -> "SearchIndex":
        """Build an index from documents, keeping their order for ties."""
        if not 0 < threshold <= 1:
            raise ValueError(f"Threshold must be in (0, 1], got {threshold}")

        weights = dict(weights or FIELD_WEIGHTS)
        total = sum(weights.values())
        if total <= 0:
            raise ValueError("Field weights must sum to a positive value")
        weights = {name: weight / total for name, weight in weights.items()}

        entries = tuple(
            _Entry(
                document=doc,
                title=doc.title.lower(),
                content=doc.plain_text.lower(),
                tags=tuple(tag.lower() for tag in doc.tags),
            )
            for doc in documents
        )
        return cls(entries, threshold, weights)

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str, limit: int) -> list[SearchHit]:
        """
        Search for documents fuzzily matching the query.

        Args:
            query: Free text query
            limit: Maximum number of results, must be > 0

        Returns:
            Hits ordered by ascending score (best first).
        """
        if limit <= 0:
            raise InvalidArgumentError(f"limit must be a positive integer, got {limit}")
        needle = query.strip().lower()
        if not needle:
            raise InvalidArgumentError("query must not be empty")

        hits: list[SearchHit] = []
        for entry in self._entries:
            distances = {
                "title": _distance(needle, entry.title),
                "content": _distance(needle, entry.content),
                "tags": min((_tag_distance(needle, tag) for tag in entry.tags), default=1.0),
            }
            matched = tuple(name for name, d in distances.items() if d <= self.threshold)
            if not matched:
                continue
            score = sum(self._weights.get(name, 0.0) * d for name, d in distances.items())
            hits.append(SearchHit(document=entry.document, score=score, matched_fields=matched))

        # sort is stable, so equal scores keep snapshot order
        hits.sort(key=lambda hit: hit.score)
        return hits[:limit]


def _distance(needle: str, haystack: str) -> float:
    if not haystack:
        return 1.0
    # partial_ratio aligns the shorter string, so a field shorter than the
    # query would match any query that happens to contain it
    if len(needle) > len(haystack):
        return 1.0 - fuzz.ratio(needle, haystack) / 100.0
    return 1.0 - fuzz.partial_ratio(needle, haystack) / 100.0


def _tag_distance(needle: str, tag: str) -> float:
    if not tag:
        return 1.0
    return 1.0 - fuzz.ratio(needle, tag) / 100.0


class SearchIndexHandle:
    """
    Holds the current SearchIndex.

    Rebuilds publish a complete new index with ``swap``; readers take
    ``current`` once per query and never see a partially built index.
    ``current`` is None until the first swap.
    """

    def __init__(self) -> None:
        self._index: SearchIndex | None = None
        self._lock = threading.Lock()
        self.generation = 0

    @property
    def current(self) -> SearchIndex | None:
        with self._lock:
            return self._index

    def swap(self, index: SearchIndex) -> None:
        with self._lock:
            self._index = index
            self.generation += 1
        logger.debug("Search index swapped (generation %d, %d documents)", self.generation, len(index))
