"""Read-only query operations over the document store and search index.

Every operation returns plain JSON-ready data. Failures come back as an
error mapping ``{"error": ..., "code": ...}`` rather than an exception:
``invalid_argument`` for malformed input, ``not_found`` for unknown ids and
``index_not_ready`` for a search before the first index build.
"""

import functools
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from markdown_brain.errors import (
    BrainError,
    DocumentNotFoundError,
    IndexNotReadyError,
    InvalidArgumentError,
)
from markdown_brain.index.models import Document
from markdown_brain.index.search import SearchIndexHandle
from markdown_brain.index.similarity import find_similar
from markdown_brain.index.store import DocumentStore

logger = logging.getLogger(__name__)

SEARCH_EXCERPT_LENGTH = 200
DATE_EXCERPT_LENGTH = 150


def error_result(error: BrainError) -> dict:
    """Structured error mapping for a BrainError."""
    result: dict[str, Any] = {"error": str(error), "code": error.code}
    if isinstance(error, DocumentNotFoundError):
        result["id"] = error.doc_id
    return result


def _structured_errors(method):
    """Convert BrainError raised by a query method into an error mapping."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except BrainError as e:
            logger.debug("%s failed: %s", method.__name__, e)
            return error_result(e)

    return wrapper


def parse_date(value: str, name: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Dates mean midnight UTC; naive datetimes are taken as UTC.

    Raises:
        InvalidArgumentError: If the value is not a valid ISO-8601 date.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} must be an ISO-8601 date string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} is not a valid ISO-8601 date: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _validate_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgumentError(f"limit must be a positive integer, got {limit!r}")
    return limit


def _excerpt(text: str, length: int) -> str:
    return text[:length] + "..."


def _timestamp(document: Document) -> str | None:
    if document.last_modified is None:
        return None
    return document.last_modified.isoformat()


class QueryDispatcher:
    """The query operations exposed to the transport.

    Holds no state of its own: each call reads a fresh snapshot of the
    store or the current search index.
    """

    def __init__(self, store: DocumentStore, index_handle: SearchIndexHandle, root: Path | None = None):
        self._store = store
        self._index_handle = index_handle
        self._root = root

    @_structured_errors
    def search(self, query: str, limit: int = 5) -> list[dict] | dict:
        """Fuzzy search over titles, content and tags, best match first."""
        limit = _validate_limit(limit)
        if not isinstance(query, str) or not query.strip():
            raise InvalidArgumentError("query must not be empty")

        index = self._index_handle.current
        if index is None:
            raise IndexNotReadyError()

        return [
            {
                "id": hit.document.id,
                "title": hit.document.title,
                "score": round(hit.score, 4),
                "excerpt": _excerpt(hit.document.plain_text, SEARCH_EXCERPT_LENGTH),
                "tags": hit.document.tags,
                "matched_fields": list(hit.matched_fields),
            }
            for hit in index.search(query, limit)
        ]

    @_structured_errors
    def get_document(self, doc_id: str) -> dict:
        """Full record for one document."""
        document = self._store.get(doc_id)
        if document is None:
            raise DocumentNotFoundError(doc_id)
        return {
            "id": document.id,
            "title": document.title,
            "metadata": document.metadata,
            "content": document.plain_text,
            "lastModified": _timestamp(document),
        }

    @_structured_errors
    def list_documents(self, tag: str | None = None) -> list[dict]:
        """All documents, or only those carrying ``tag``."""
        documents = self._store.snapshot()
        if tag:
            documents = tuple(doc for doc in documents if tag in doc.tags)
        return [
            {
                "id": doc.id,
                "title": doc.title,
                "tags": doc.tags,
                "lastModified": _timestamp(doc),
            }
            for doc in documents
        ]

    @_structured_errors
    def find_similar(self, doc_id: str, limit: int = 3) -> list[dict] | dict:
        """Documents ranked by token overlap with ``doc_id``."""
        limit = _validate_limit(limit)
        hits = find_similar(self._store.snapshot(), doc_id, limit)
        if hits is None:
            raise DocumentNotFoundError(doc_id)
        return [
            {
                "id": hit.document.id,
                "title": hit.document.title,
                "score": round(hit.score, 4),
            }
            for hit in hits
        ]

    @_structured_errors
    def search_by_date(self, after: str | None = None, before: str | None = None) -> list[dict] | dict:
        """Documents modified strictly after/before the given dates, newest first."""
        after_dt = parse_date(after, "after") if after else None
        before_dt = parse_date(before, "before") if before else None

        documents = [
            doc
            for doc in self._store.snapshot()
            if doc.last_modified is not None
            and (after_dt is None or doc.last_modified > after_dt)
            and (before_dt is None or doc.last_modified < before_dt)
        ]
        documents.sort(key=lambda doc: doc.last_modified, reverse=True)

        return [
            {
                "id": doc.id,
                "title": doc.title,
                "lastModified": _timestamp(doc),
                "excerpt": _excerpt(doc.plain_text, DATE_EXCERPT_LENGTH),
            }
            for doc in documents
        ]

    def status(self) -> dict:
        """Document count and index readiness."""
        index = self._index_handle.current
        return {
            "documents": len(self._store),
            "index_ready": index is not None,
            "indexed_documents": len(index) if index is not None else 0,
            "root": str(self._root) if self._root is not None else None,
        }
