"""Shared fixtures for markdown-brain tests."""

import time
from datetime import datetime, timezone

import pytest

from markdown_brain.index import Document, DocumentStore, SearchIndex, SearchIndexHandle
from markdown_brain.index.normalizer import tokenize


def wait_for_condition(condition_fn, timeout: float = 5.0, interval: float = 0.05) -> bool:
    """Wait for a condition to become true, polling at interval.

    Returns:
        True if condition was met, False if timeout was reached.
    """
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition_fn():
            return True
        time.sleep(interval)
    return False


def make_document(
    doc_id: str,
    text: str = "",
    title: str | None = None,
    tags: list[str] | None = None,
    modified: datetime | None = None,
    metadata: dict | None = None,
) -> Document:
    """Build a Document directly, without touching the filesystem."""
    metadata = dict(metadata or {})
    if tags is not None:
        metadata["tags"] = tags
    return Document(
        id=doc_id,
        title=title if title is not None else doc_id.rsplit("/", 1)[-1].removesuffix(".md"),
        plain_text=text,
        metadata=metadata,
        last_modified=modified or datetime(2024, 1, 1, tzinfo=timezone.utc),
        tokens=frozenset(tokenize(text)),
    )


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def index_handle() -> SearchIndexHandle:
    return SearchIndexHandle()


@pytest.fixture
def rebuild(store, index_handle):
    """Rebuild the search index from the store, as the synchronizer does."""

    def _rebuild() -> SearchIndex:
        index = SearchIndex.build(store.snapshot())
        index_handle.swap(index)
        return index

    return _rebuild
