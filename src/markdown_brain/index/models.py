"""Data models for the document index."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Document:
    """One markdown file as held in the store.

    Records are immutable; a changed file produces a new record that
    replaces the old one wholesale.
    """

    id: str  # Relative to the docs root, POSIX separators
    title: str
    plain_text: str
    metadata: dict[str, Any] = field(default_factory=dict, hash=False)
    last_modified: datetime | None = None
    tokens: frozenset[str] = frozenset()

    @property
    def tags(self) -> list[str]:
        """Tags from front-matter as a list of strings."""
        return tags_from_metadata(self.metadata)


@dataclass(frozen=True)
class SearchHit:
    """A fuzzy search match (lower score is better)."""

    document: Document
    score: float
    matched_fields: tuple[str, ...]


@dataclass(frozen=True)
class SimilarHit:
    """A document ranked by token overlap with a target."""

    document: Document
    score: float


def tags_from_metadata(metadata: dict[str, Any]) -> list[str]:
    """Extract tags from a metadata mapping.

    Lists are taken item by item; a plain string is split on commas.
    Anything else (missing, numbers, mappings) yields no tags.
    """
    raw = metadata.get("tags")
    if isinstance(raw, (list, tuple)):
        return [str(t) for t in raw if t is not None]
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return []
